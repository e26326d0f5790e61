#!/usr/bin/env python3
"""
Bank statement extraction: turns a text-layer PDF statement into a ledger.

Usage:
    python extract.py statement.pdf
    python extract.py statement.pdf -o transactions.json --type debit --sort amount
"""
import sys
import json
import asyncio
import logging
import argparse
from pathlib import Path
from typing import List, Optional

import pandas as pd

from errors import NoExtractableTextError, NoTransactionsRecognizedError, StatementExtractionError
from extractor import TransactionExtractor
from file_loader import FileLoader
from preprocess import DataPreprocessor
from schema import Transaction, TransactionList
from summary import SORT_KEYS, TYPE_FILTERS, filter_ledger, summarize_ledger

logger = logging.getLogger(__name__)


class StatementProcessor:
    """Main processor for bank statements."""

    def __init__(
        self,
        file_loader: FileLoader = None,
        preprocessor: DataPreprocessor = None,
        extractor: TransactionExtractor = None,
    ):
        self.file_loader = file_loader or FileLoader()
        self.preprocessor = preprocessor or DataPreprocessor()
        self.extractor = extractor or TransactionExtractor()

    async def process_bytes(self, data: bytes, source: Optional[str] = None) -> TransactionList:
        """
        Run the whole extraction over one document.

        Args:
            data: Raw PDF bytes
            source: Optional label for the document, recorded in the metadata

        Returns:
            TransactionList with the ledger in reading order

        Raises:
            DocumentFormatError: The bytes are not a readable PDF
            NoExtractableTextError: No page has any text
            NoTransactionsRecognizedError: Text exists but no line is a transaction row
        """
        logger.info(f"Starting processing of {source or 'document'} ({len(data)} bytes)")

        try:
            pages = await self.file_loader.extract_pages(data)

            lines = self.preprocessor.preprocess_pages(pages)
            if not lines:
                raise NoExtractableTextError()

            candidates = self.preprocessor.filter_noise(lines)
            transactions = self.extractor.extract_from_lines(candidates)
            if not transactions:
                raise NoTransactionsRecognizedError()

        except StatementExtractionError as e:
            logger.error(f"Error processing {source or 'document'}: {str(e)}")
            raise

        metadata = {
            'source_file': source,
            'page_count': len(pages),
            'line_count': len(lines),
            'noise_line_count': len(lines) - len(candidates),
            'candidate_line_count': len(candidates),
            'transaction_count': len(transactions),
            'skipped_line_count': len(candidates) - len(transactions),
            'processing_date': str(pd.Timestamp.now()),
        }

        logger.info(f"Successfully processed {len(transactions)} transactions")
        return TransactionList(
            transactions=transactions,
            total_count=len(transactions),
            processing_metadata=metadata,
        )

    def process_file(self, file_path: str) -> TransactionList:
        """Load a statement from disk and extract its ledger."""
        data = self.file_loader.load_file(file_path)
        return asyncio.run(self.process_bytes(data, source=file_path))


async def extract_transactions(data: bytes) -> List[Transaction]:
    """Extract the ledger of a PDF statement held in memory."""
    result = await StatementProcessor().process_bytes(data)
    return list(result.transactions)


def configure_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description='Extract transactions from bank statements')
    parser.add_argument('file_path', help='Path to bank statement file')
    parser.add_argument('-o', '--output', help='Output JSON file path')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    parser.add_argument('--search', default='', help='Only print transactions whose description contains this text')
    parser.add_argument('--type', default='all', choices=sorted(TYPE_FILTERS), help='Only print credits or debits')
    parser.add_argument('--sort', default='none', choices=sorted(SORT_KEYS), help='Order of printed transactions')

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    # Validate input file
    if not Path(args.file_path).exists():
        print(f"Error: File not found - {args.file_path}")
        return 1

    try:
        result = StatementProcessor().process_file(args.file_path)
    except StatementExtractionError as e:
        logger.error(f"Processing failed: {str(e)}")
        print(f"Error: {str(e)}")
        return 1

    shown = filter_ledger(result.transactions, search=args.search, transaction_type=args.type, sort_by=args.sort)
    output_data = result.model_dump()
    output_data['transactions'] = [t.model_dump() for t in shown]

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            json.dump(output_data, f, indent=2, ensure_ascii=False)
        print(f"Results written to: {args.output}")
    else:
        print(json.dumps(output_data, indent=2, ensure_ascii=False))

    summary = summarize_ledger(result.transactions)
    print(f"\nSummary:")
    print(f"- Total transactions processed: {result.total_count}")
    print(f"- Transactions shown: {len(shown)}")
    print(f"- Source file: {result.processing_metadata['source_file']}")
    print(f"- Current balance: {summary.current_balance:.2f}")
    print(f"- Total credits: {summary.total_credit:.2f}")
    print(f"- Total debits: {summary.total_debit:.2f}")
    print(f"- Net flow: {summary.net_flow:.2f}")
    print(f"- Average amount: {summary.average_amount:.2f}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
