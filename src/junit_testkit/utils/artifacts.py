import pathlib, datetime
from typing import BinaryIO, Optional
def resolve_report_file(report_path: str, now: Optional[datetime.datetime] = None) -> pathlib.Path:
    p = pathlib.Path(report_path)
    if p.is_dir():
        now = now or datetime.datetime.now(datetime.timezone.utc)
        return p / f"{int(now.timestamp() * 1000)}.xml"
    p.parent.mkdir(parents=True, exist_ok=True)
    return p
def open_report_sink(report_path: Optional[str], now: Optional[datetime.datetime] = None) -> Optional[BinaryIO]:
    # Unbuffered so every fragment reaches the file as soon as it is written.
    if not report_path:
        return None
    return resolve_report_file(report_path, now).open("wb", buffering=0)
