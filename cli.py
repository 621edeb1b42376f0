#!/usr/bin/env python3
import argparse

from qbank.orchestrator import run_once


def main(argv=None):
    parser = argparse.ArgumentParser(description="Build question-bank bundles and manifest from CSV files")
    parser.add_argument("--config", help="Path to YAML config (optional)")
    parser.add_argument("--data-dir", dest="data_dir", help="Directory holding rNN_*.csv inputs")
    parser.add_argument("--dist-dir", dest="dist_dir", help="Output directory for bundles/ and manifest.json")
    parser.add_argument("--content-version", dest="content_version", help="Override content version (else CONTENT_VERSION or build date)")
    args = parser.parse_args(argv)

    overrides = {
        "data_dir": args.data_dir,
        "dist_dir": args.dist_dir,
        "content_version": args.content_version,
    }

    run_once(args.config, overrides=overrides)


if __name__ == "__main__":
    main()
