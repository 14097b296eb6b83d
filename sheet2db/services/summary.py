from __future__ import annotations

from ..models.conversion_result import BatchResult

"""SUMMARY line rendering."""


def _format_number(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # 指数表記を避ける
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: BatchResult) -> str:
    """Render the SUMMARY line for a batch run.

    Format:
    SUMMARY files={total} success={success} failed={failed} skipped={skipped}
    rows={rows} elapsed_sec={elapsed} throughput_rps={throughput}

    >>> from datetime import datetime, timezone
    >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
    >>> render_summary_line(BatchResult(
    ...     success_files=2, failed_files=1, skipped_files=0, total_inserted_rows=1000,
    ...     start_time=t, end_time=t, elapsed_seconds=2.0, throughput_rows_per_sec=500.0))
    'SUMMARY files=3 success=2 failed=1 skipped=0 rows=1000 elapsed_sec=2 throughput_rps=500'
    """
    return (
        f"SUMMARY files={result.total_files} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"skipped={result.skipped_files} "
        f"rows={result.total_inserted_rows} "
        f"elapsed_sec={_format_number(result.elapsed_seconds)} "
        f"throughput_rps={_format_number(result.throughput_rows_per_sec)}"
    )
