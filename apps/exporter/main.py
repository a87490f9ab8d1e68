from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from loguru import logger

from packages.adapters.bybit.client import BybitRestClient
from packages.common.config import ExporterConfig, load_exporter_config
from packages.common.constants import INTEGRATION_NAME
from packages.common.datetime_utils import today_iso, today_minus_one_month_iso
from packages.common.logging_setup import setup_logging
from packages.history.fetcher import FetchSettings, PaginatedFetcher
from packages.history.sequencer import ChunkSequencer
from packages.ledger.export import LedgerExporter
from packages.ledger.formatter import LedgerFormatter


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Export Bybit spot trades as ledger import CSV.")
    p.add_argument("start_date", nargs="?", default=None, help="YYYY-MM-DD (default: today minus one month)")
    p.add_argument("end_date", nargs="?", default=None, help="YYYY-MM-DD (default: today)")

    p.add_argument("--config", default="config/exporter.yaml", help="Exporter yaml path (optional)")
    p.add_argument("--out-dir", default=None, help="Output directory override")
    p.add_argument("--chunk-days", type=int, default=None, help="Days per API query window override")
    p.add_argument("--group-by", choices=["tradeId", "orderId"], default=None, help="Leg correlation field")
    p.add_argument("--log-level", default=None, help="Log level (default: $LOG_LEVEL or INFO)")
    return p.parse_args(argv)


def _resolve_chunk_days(override: int | None, cfg: ExporterConfig) -> int:
    # 0 or negative overrides are passed through so date_chunks rejects them
    return override if override is not None else cfg.fetch.chunk_size_days


def _build_exporter(cfg: ExporterConfig) -> LedgerExporter:
    client = BybitRestClient(cfg.bybit)
    fetcher = PaginatedFetcher(
        client.get_transaction_log,
        cfg=FetchSettings(page_limit=cfg.fetch.page_limit, page_delay_ms=cfg.fetch.page_delay_ms),
    )
    formatter = LedgerFormatter(
        settlement_currency=cfg.ledger.settlement_currency,
        trade_system_id=cfg.ledger.trade_system_id,
        buy_side=cfg.ledger.buy_side,
        timezone=cfg.ledger.timezone,
    )
    return LedgerExporter(
        sequencer=ChunkSequencer(fetcher),
        formatter=formatter,
        group_by=cfg.ledger.group_by,
    )


async def main_async(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    cfg = load_exporter_config(Path(args.config))

    setup_logging(INTEGRATION_NAME, cfg.output.logs_dir, args.log_level)

    start_date = args.start_date or today_minus_one_month_iso()
    end_date = args.end_date or today_iso()
    chunk_days = _resolve_chunk_days(args.chunk_days, cfg)
    out_dir = Path(args.out_dir or cfg.output.out_dir)
    if args.group_by:
        cfg = cfg.model_copy(update={"ledger": cfg.ledger.model_copy(update={"group_by": args.group_by})})

    if not cfg.bybit.api_key or not cfg.bybit.api_secret:
        logger.error("Bybit credentials missing - set BYBIT_API_KEY and BYBIT_API_SECRET")
        return 2

    logger.info(
        "Exporter starting start={} end={} chunk_days={} group_by={} out_dir={}",
        start_date,
        end_date,
        chunk_days,
        cfg.ledger.group_by,
        out_dir,
    )

    exporter = _build_exporter(cfg)
    path = await exporter.export(start_date, end_date, chunk_days, out_dir)

    if path is None:
        logger.info("Exporter complete - no trades for {}..{}", start_date, end_date)
    else:
        logger.info("Exporter complete file={}", path)
    return 0


def main() -> None:
    try:
        code = asyncio.run(main_async())
    except KeyboardInterrupt:
        logger.info("Interrupted.")
        code = 130
    except Exception as e:
        logger.exception("Exporter failed: {}", e)
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
