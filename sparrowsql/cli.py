from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from click import Group
    from rich.table import Table

    from sparrowsql.typing import DictRow

__all__ = ("get_sparrow_group", "main", "rows_table")


def rows_table(rows: "list[DictRow]", title: Optional[str] = None) -> "Table":
    """Render result rows as a rich table, one column per key of the first row."""
    from rich.table import Table

    table = Table(title=title, show_lines=False)
    columns = list(rows[0].keys()) if rows else []
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*("NULL" if row.get(column) is None else str(row.get(column)) for column in columns))
    return table


def get_sparrow_group() -> "Group":
    """Get the sparrowsql CLI group.

    Raises:
        MissingDependencyError: If the `click` package is not installed.

    Returns:
        The sparrowsql CLI group.
    """
    from sparrowsql.exceptions import MissingDependencyError

    try:
        import rich_click as click
    except ImportError:
        try:
            import click  # type: ignore[no-redef]
        except ImportError as e:
            raise MissingDependencyError(package="click", install_package="cli") from e

    @click.group(name="sparrow")
    @click.option("--log-level", default="WARNING", show_default=True, help="Logging level for sparrowsql loggers.")
    @click.option("--log-json", is_flag=True, default=False, help="Emit structured JSON log lines.")
    def sparrow_group(log_level: str, log_json: bool) -> None:
        """sparrowsql CLI commands."""
        from sparrowsql.utils.logging import configure_logging

        configure_logging(level=log_level.upper(), format_style="structured" if log_json else "simple")

    @sparrow_group.command(name="query", help="Execute SQL against a database and print the rows.")
    @click.argument("db_url")
    @click.argument("sql")
    @click.option("--key", default=None, help="Cache key for the result rows.")
    @click.option("--cache", "cache_spec", default=None, help="Cache directory or URL, e.g. ./cache or memory://.")
    @click.option("--stats", "show_stats", is_flag=True, default=False, help="Print query statistics.")
    def query(db_url: str, sql: str, key: Optional[str], cache_spec: Optional[str], show_stats: bool) -> None:
        from rich import get_console

        from sparrowsql.base import Sparrow
        from sparrowsql.exceptions import SparrowError

        console = get_console()
        try:
            sparrow = Sparrow(db_url, cache=cache_spec)
            sparrow.cache_enabled = cache_spec is not None
            sparrow.show_sql = True
            sparrow.stats_enabled = show_stats
            sparrow.sql(sql)
            rows = sparrow.execute().rows if key is None else sparrow.many(key)
        except SparrowError as e:
            console.print(str(e), style="red", markup=False)
            raise SystemExit(1) from e

        if rows:
            console.print(rows_table(rows, title=sql))
        elif sparrow.affected_rows is not None:
            console.print(f"[green]{sparrow.affected_rows} row(s) affected[/]")
        if sparrow.is_cached:
            console.print("[dim]served from cache[/]")
        if show_stats:
            _print_stats(console, sparrow.get_stats().as_dict())

    return sparrow_group


def _print_stats(console: Any, stats: "dict[str, Any]") -> None:
    from rich.table import Table

    table = Table(title="Query statistics")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    for metric in ("num_queries", "num_rows", "num_changes", "total_time", "avg_query_time"):
        table.add_row(metric, str(stats[metric]))
    console.print(table)


def main() -> None:
    """Console script entry point."""
    get_sparrow_group()()
