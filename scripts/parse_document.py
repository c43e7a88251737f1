#!/usr/bin/env python
import argparse
import sys
from pathlib import Path

from prep_bank.parsing import parse_markdown_file, save_topic_json


def main():
    parser = argparse.ArgumentParser(
        description="Parse an interview prep markdown document and report what was found."
    )
    parser.add_argument("input_md", help="Path to the markdown document")
    parser.add_argument(
        "-o",
        "--output",
        dest="output_json",
        help="Optional path to write the parsed topic data as JSON",
    )
    parser.add_argument(
        "--en",
        action="store_true",
        help="Treat the document as the English one (sets title_en)",
    )
    args = parser.parse_args()

    if not Path(args.input_md).exists():
        print(f"Missing input document: {args.input_md}")
        sys.exit(1)

    # Step 1: parse
    topic = parse_markdown_file(args.input_md, is_en=args.en)
    print(f"Title: {topic.title}")
    print(f"Parsed {len(topic.sections)} sections, {topic.total_questions} questions.")
    dc = topic.difficulty_count
    print(f"Difficulty: easy={dc.easy} medium={dc.medium} hard={dc.hard}")

    # Step 2: declared vs parsed counts per section
    print("\n=== Sections ===")
    mismatches = 0
    for section in topic.sections:
        flag = ""
        if section.parsed_count != section.question_count:
            flag = "  <-- declared count differs"
            mismatches += 1
        print(
            f"  {section.id}: {section.title} "
            f"(declared {section.question_count}, parsed {section.parsed_count}, "
            f"{len(section.subsections)} subsections){flag}"
        )

    if mismatches:
        print(f"\n{mismatches} section(s) where the heading count doesn't match the parse.")

    # Step 3: optional JSON
    if args.output_json:
        out_path = Path(args.output_json)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        save_topic_json(topic, str(out_path))
        print(f"Wrote topic data JSON to: {out_path}")


if __name__ == "__main__":
    main()
