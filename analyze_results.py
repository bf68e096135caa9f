#!/usr/bin/env python3
"""
Helper script to analyze the scraper output file.
"""

import argparse
import csv
from collections import Counter

from book_scraper import DELIMITER


def analyze_results(file_path, sample_size=3):
    """Analyze a scraper output file and return aggregate statistics."""
    with open(file_path, 'r', encoding='utf-8', newline='') as f:
        # The scraper never quotes fields; ';' inside values is already replaced
        rows = list(csv.DictReader(f, delimiter=DELIMITER, quoting=csv.QUOTE_NONE))

    ratings = Counter()
    for row in rows:
        try:
            ratings[int(row['rating'])] += 1
        except (TypeError, ValueError):
            ratings[0] += 1

    in_stock = sum(1 for row in rows if (row['availability'] or '').lower().startswith('in stock'))

    return {
        "total_books": len(rows),
        "ratings": {stars: ratings.get(stars, 0) for stars in range(6)},
        "in_stock": in_stock,
        "not_in_stock": len(rows) - in_stock,
        "without_description": sum(1 for row in rows if not row['description']),
        "sample_titles": [row['title'] for row in rows[:sample_size]],
    }


def print_report(stats):
    print("=== Book Catalogue Analysis ===\n")
    print(f"Total books: {stats['total_books']}")
    print(f"In stock: {stats['in_stock']}")
    print(f"Not in stock: {stats['not_in_stock']}")
    print(f"Without description: {stats['without_description']}\n")

    total = stats['total_books']
    print("Ratings:")
    for stars, count in stats['ratings'].items():
        share = count / total * 100 if total else 0.0
        label = "unrated" if stars == 0 else f"{stars} star{'s' if stars > 1 else ''}"
        print(f"  {label}: {count} books ({share:.1f}%)")

    if stats['sample_titles']:
        print("\nSample titles:")
        for title in stats['sample_titles']:
            print(f"  {title}")


def main(argv=None):
    parser = argparse.ArgumentParser(description='Analyze scraper results')
    parser.add_argument('--file', default='books.csv',
                      help='Path to results file (default: books.csv)')

    args = parser.parse_args(argv)
    print_report(analyze_results(args.file))


if __name__ == "__main__":
    main()
