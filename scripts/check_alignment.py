#!/usr/bin/env python
import argparse
import sys
from pathlib import Path

from prep_bank.parsing import check_alignment, parse_markdown_file


def main():
    parser = argparse.ArgumentParser(
        description="Check that the two language versions of the document line up "
                    "section for section before titles are mapped across."
    )
    parser.add_argument("primary_md", help="Primary (Russian) document")
    parser.add_argument("secondary_md", help="Secondary (English) document")
    args = parser.parse_args()

    for path in (args.primary_md, args.secondary_md):
        if not Path(path).exists():
            print(f"Missing input document: {path}")
            sys.exit(1)

    primary = parse_markdown_file(args.primary_md, is_en=False)
    secondary = parse_markdown_file(args.secondary_md, is_en=True)

    print(f"Primary   : {Path(args.primary_md).name} ({len(primary.sections)} sections)")
    print(f"Secondary : {Path(args.secondary_md).name} ({len(secondary.sections)} sections)")

    # Show how sections would be paired by position
    print("\n=== Pairing ===")
    for i, section in enumerate(primary.sections):
        other = secondary.sections[i].title if i < len(secondary.sections) else "(none)"
        print(f"  {section.id}: {section.title}  ->  {other}")

    issues = check_alignment(primary, secondary)
    if not issues:
        print("\nDocuments are aligned 🎉")
        return

    print(f"\n=== {len(issues)} alignment issue(s) ===")
    for issue in issues:
        print(f"  • {issue}")
    sys.exit(1)


if __name__ == "__main__":
    main()
