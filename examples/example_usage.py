"""Example: drive the service layer directly, without Flask.

Generates two chained runs in one session and writes the formula workbook.
"""

from pathlib import Path

from src.worktimeline.worktimeline.container import build_container
from src.worktimeline.worktimeline.timeline.requests import parse_timeline_request


def main():
    container = build_container()
    session = container.history_repo.create_session("Example")

    morning = parse_timeline_request(
        {
            "card_name": "Pump overhaul",
            "start": "2026-03-02T10:30",
            "lunch": {"start": "12:00", "duration": 45},
            "workers": {"count": 2, "ids": ["1001", "1002"]},
            "operations": [
                {"name": "Inspect", "duration": 60},
                {"name": "Disassemble", "duration": 90, "pause": 10},
            ],
        }
    )
    afternoon = parse_timeline_request(
        {
            "card_name": "Pump overhaul",
            "chain": True,
            "lunch": {"start": "12:00", "duration": 45},
            "workers": {"count": 2, "ids": ["1001", "1002"]},
            "operations": [{"name": "Reassemble", "duration": 2, "unit": "hour"}],
        }
    )
    for request in (morning, afternoon):
        entry = container.timeline_service.generate(session.session_id, request)
        for row in entry.rows:
            print(row.position, row.worker_label, row.name, row.start, row.end, "lunch" if row.crossed_lunch else "")

    out = container.export_service.export(session.session_id)
    Path("timeline.xlsx").write_bytes(out.getvalue())
    print("written timeline.xlsx")


if __name__ == "__main__":
    main()
