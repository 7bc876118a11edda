"""Plain-text rendering of query results for the command line."""

from orgmeta.features.org_query.schemas import QueryResult


def render_table(result: QueryResult) -> str:
    """Render an org-style table: | a | b | with a header separator."""
    widths = [len(header) for header in result.headers]
    for row in result.rows:
        widths = [max(width, len(value)) for width, value in zip(widths, row, strict=True)]

    def line(cells) -> str:
        return "| " + " | ".join(cell.ljust(width) for cell, width in zip(cells, widths)) + " |"

    separator = "|-" + "-+-".join("-" * width for width in widths) + "-|"
    return "\n".join([line(result.headers), separator, *(line(row) for row in result.rows)])


def render_list(result: QueryResult) -> str:
    """Render one bullet per row, first column first, the rest in parentheses."""
    lines: list[str] = []
    for row in result.rows:
        head, *rest = row
        details = ", ".join(
            f"{header}: {value}" for header, value in zip(result.headers[1:], rest) if value
        )
        lines.append(f"- {head} ({details})" if details else f"- {head}")
    return "\n".join(lines)
