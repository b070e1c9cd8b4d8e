'''
Orchestrator

Single responsibility: glue the report-to-issue-body pipeline together.

Responsibilities:
- Parse CLI arguments
- Load configuration and set up logging
- Load the report, build the body, write it out

This file contains no business logic.

'''
import argparse
import os
import sys


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Render an alert investigation report as an issue body")
    p.add_argument("input", nargs="?", help="Report JSON path")
    p.add_argument("--outdir", "-o", default=None, help="Output directory (default from config)")
    p.add_argument("--sample", action="store_true", help="Use the bundled sample report")
    p.add_argument("--stdout", action="store_true", help="Print the body instead of writing a file")
    p.add_argument("--config", "-c", default=None, help="Path to an alternative config.yml")
    p.add_argument("--log-level", default=None, help="Override the configured log level")
    return p.parse_args(argv)


from IssueBody.Body.body import report_to_body
from IssueBody.Config.config import RenderConfigLoader, get_config
from IssueBody.Ingest.loader import load_report
from IssueBody.Logging.logger import configure_logging, get_logger

logger = get_logger("main")


def main(argv=None):
    args = parse_args(argv)

    try:
        config = RenderConfigLoader(args.config) if args.config else get_config()
        configure_logging(args.log_level or config.get_log_level())

        report = load_report(path=args.input, use_sample=args.sample)
        body = report_to_body(report, logger=get_logger("IssueBody.Body"), config=config)

        if args.stdout:
            sys.stdout.write(body.getvalue())
            return 0

        # Write body to <outdir>/bodies/<report_id>.md
        bodies_dir = os.path.join(args.outdir or config.get_output_dir(), "bodies")
        os.makedirs(bodies_dir, exist_ok=True)
        file_path = os.path.join(bodies_dir, f"{report.id}.md")
        with open(file_path, "w", encoding="utf-8") as f:
            f.write(body.getvalue())
    except (OSError, ValueError) as e:
        print(f"Error rendering issue body: {e}", file=sys.stderr)
        return 1

    logger.info("Wrote issue body for report %s to %s", report.id, file_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
