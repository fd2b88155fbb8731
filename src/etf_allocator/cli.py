"""
ETF Allocator CLI
=================
Carica un catalogo CSV, applica un piano di allocazione e stampa il riepilogo.

Usage:
    etf-allocator catalogo.csv --config piano.yaml
    etf-allocator catalogo.csv --config piano.json --export-dir ./output --formats csv,txt
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from etf_allocator import __version__
from etf_allocator.config.loader import apply_plan, build_runtime_config, load_config_file
from etf_allocator.config.user_config import get_config
from etf_allocator.core.session import PortfolioSession
from etf_allocator.reporting.console import print_summary
from etf_allocator.reporting.export import export_all_data
from etf_allocator.utils.exceptions import ETFAllocatorError
from etf_allocator.utils.logger import get_logger, set_console_level

logger = get_logger(__name__)

CONFIG_PATH_ENV = "ETF_ALLOCATOR_CONFIG_PATH"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="etf-allocator",
        description="Costruisci un portafoglio ETF da un catalogo CSV",
    )
    parser.add_argument("csv", help="Catalogo ETF in formato CSV")
    parser.add_argument("--config", help="Piano di allocazione JSON/YAML", default=None)
    parser.add_argument("--export-dir", help="Abilita l'export nella directory indicata", default=None)
    parser.add_argument("--formats", help="Formati export separati da virgola (csv,json,txt)", default=None)
    parser.add_argument("--verbose", "-v", action="store_true", help="Log dettagliati su stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        set_console_level(logging.DEBUG)

    try:
        config = get_config()
        config_path = args.config or os.environ.get(CONFIG_PATH_ENV)
        if config_path:
            config = build_runtime_config(load_config_file(config_path), base=config)
            logger.info(f"Piano di allocazione: {config_path}")

        if args.export_dir:
            config["export"]["enabled"] = True
            config["export"]["output_dir"] = args.export_dir
        if args.formats:
            config["export"]["formats"] = [f.strip() for f in args.formats.split(",") if f.strip()]

        session = PortfolioSession(reference_amounts=config["reference_amounts"])
        session.load_csv(args.csv)
        apply_plan(session, config)

        print_summary(session)
        exported = export_all_data(session.export(), config["export"], session.metrics().summary())
        if exported:
            print(f"\n📁 File esportati in {exported[0].parent}:")
            for path in exported:
                print(f"  ✓ {path.name}")
    except ETFAllocatorError as exc:
        logger.error(str(exc))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
