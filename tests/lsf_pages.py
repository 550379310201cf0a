"""Small HTML builders shaped like the LSF course pages the parser reads."""
from typing import Iterable, Optional

SUMMARY = "Übersicht über alle Veranstaltungstermine"


def summary_row(
    expand_href: str,
    time_text: str = "10:00&nbsp;bis&nbsp;11:30",
    room: Optional[str] = "F-033",
    note: str = "",
) -> str:
    room_cell = f'<a href="/room?id=1">{room}</a>' if room is not None else ""
    return (
        "<tr>"
        f'<td><a href="{expand_href}"><img alt="mehr"/></a></td>'
        "<td>Mo.</td>"
        f"<td>{time_text}</td>"
        "<td>wöch</td>"
        "<td>13.10.2026 bis 26.01.2027</td>"
        f"<td>{room_cell}</td>"
        "<td>Prof. Dr. Muster</td>"
        "<td></td>"
        "<td></td>"
        f"<td>{note}</td>"
        "</tr>"
    )


def detail_row(dates: Iterable[str]) -> str:
    items = "".join(f"<li>{value} <span>(Mo.)</span></li>" for value in dates)
    return f'<tr><td colspan="10"><div><ul>{items}</ul></div></td></tr>'


def overview_table(rows: Iterable[str], caption: str = "Termine Gruppe: [unbenannt]") -> str:
    header = "<tr><th>Rhythmus</th><th>Tag</th><th>Zeit</th></tr>"
    return (
        f'<table summary="{SUMMARY}">'
        f'<caption class="t_capt">{caption}</caption>'
        f"<tbody>{header}{''.join(rows)}</tbody>"
        "</table>"
    )


def course_page(title: str, tables: Iterable[str]) -> str:
    return (
        "<html><body><div><form>"
        f"<h1>\n  {title} - Einzelansicht\n</h1>"
        "</form></div>"
        f"{''.join(tables)}"
        "</body></html>"
    )


def expanded_page(captions: Iterable[str]) -> str:
    tables = [overview_table([], caption=caption) for caption in captions]
    return course_page("ignored", tables)
