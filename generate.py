#!/usr/bin/env python3
"""
Grade Sheet Generator

Reads a school grading template (or a sheet this tool produced), prints the
class statistics and writes the simplified grade sheet named the way the
editor names its uploads.

Usage:
    python generate.py Maths.xlsx --class "6eme" --term 2
    python generate.py Maths.xlsx --class "Form 1" --output Maths-T1.xlsx
    python generate.py --list-templates --class "Form 1"
"""

import argparse
from pathlib import Path

from gradesheet import (
    calculate_statistics,
    calculate_term_statistics,
    list_templates,
    load_config,
    load_grading_file,
)
from gradesheet.classes import class_folder
from gradesheet.errors import TemplateParseError
from gradesheet.excel_generator import generate_workbook, upload_file_name
from gradesheet.logging_setup import configure_logging


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Summarise and export a grading template.")
    parser.add_argument("template", nargs="?", help="Path to the .xlsx grading template")
    parser.add_argument("--class", dest="class_name", default=None, help="Class name, e.g. '6eme' or 'Form 1'")
    parser.add_argument("--term", default="", help="Term written into the output name (default: T1)")
    parser.add_argument("--output", default=None, help="Output file (default: <subject>-<term>-<NOTE columns>.xlsx)")
    parser.add_argument("--config", default="config.json", help="Configuration JSON file")
    parser.add_argument("--list-templates", action="store_true", help="List the templates stored for --class")
    parser.add_argument("--templates-dir", default=None, help="Template root (default: templates_dir from config)")
    return parser.parse_args(argv)


def print_templates(templates_dir: str, class_name: str | None) -> int:
    try:
        names = list_templates(templates_dir, class_folder(class_name or ""))
    except ValueError as e:
        print(f"❌ Error: {e}")
        return 1

    if not names:
        print(f"No templates for {class_name} in {templates_dir}")
        return 0

    print(f"📂 Templates for {class_name}:")
    for name in names:
        print(f"   - {name}")
    return 0


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    config = load_config(args.config)
    configure_logging(config)

    if args.list_templates:
        return print_templates(args.templates_dir or config["templates_dir"], args.class_name)

    print("📝 Grade Sheet Generator")
    print("=" * 40)

    if not args.template:
        print("❌ Error: no template given!")
        return 1

    template_path = Path(args.template)
    if not template_path.exists():
        print(f"❌ Error: {template_path} not found!")
        return 1

    try:
        grid = load_grading_file(
            template_path.read_bytes(),
            args.class_name,
            text_max_length=config["text_max_length"],
        )
    except TemplateParseError as e:
        print(f"❌ Error: {e}")
        return 1

    print(f"✓ Loaded {grid.student_count} students from {template_path}")
    print(f"   Graded out of {grid.convention.max_grade}")

    # Template sheets carry no gender column, so only class-wide figures are shown
    stats = calculate_statistics(grid.records())
    term_stats = calculate_term_statistics(grid.term_counters())

    # Summary
    print("\n" + "=" * 40)
    print("📋 Summary:")
    print(f"   Graded students: {stats.total_students}")
    print(f"   At or above 10: {stats.students_above_10}")
    print(f"   Below 10: {stats.students_below_10}")
    print(f"   Average: {stats.average_grade:.2f}")
    print(f"   Pass rate: {stats.pass_rate:.1f}%")
    print(f"   Courses: {term_stats.courses.done}/{term_stats.courses.expected} ({term_stats.courses.percentage}%)")
    print(f"   Period hours: {term_stats.period_hours.done}/{term_stats.period_hours.expected} ({term_stats.period_hours.percentage}%)")
    print(f"   TP/TD: {term_stats.tp_td.done}/{term_stats.tp_td.expected} ({term_stats.tp_td.percentage}%)")

    output_file = args.output or str(
        template_path.with_name(upload_file_name(template_path.name, args.term, grid.header))
    )
    generate_workbook(grid).save(output_file)
    print(f"\n✓ Saved to {output_file}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
