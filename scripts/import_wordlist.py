"""Import a newline-delimited word list into the Word Finder database."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Iterator, List, Optional

REPO_ROOT = Path(__file__).resolve().parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from word_finder.app.data.database import SQLiteWordRepository
from word_finder.utils.logging_config import configure_logging


def iter_word_file(path: Path, encoding: str = "utf-8") -> Iterator[str]:
    with path.open("r", encoding=encoding) as handle:
        for line in handle:
            word = line.strip()
            if word and not word.startswith("#"):
                yield word


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("wordlist", type=Path, help="file with one word per line")
    parser.add_argument("--db", default="words.db", help="SQLite database path")
    parser.add_argument("--encoding", default="utf-8")
    parser.add_argument("--log-level", default=None)
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    if not args.wordlist.is_file():
        parser.error(f"word list not found: {args.wordlist}")

    repository = SQLiteWordRepository(args.db)
    try:
        inserted = repository.import_words(iter_word_file(args.wordlist, args.encoding))
        total = repository.count_words()
    finally:
        repository.close()
    print(f"Imported {inserted} new words; {total} words in {args.db}.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
