from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
import os
from ..config import ReporterOptions
from .formatting import escape

@dataclass
class ScreenshotLocator:
    """Finds the screenshot to attach to each failing test of one suite.

    ``loop`` mode hands out matching files from the report directory in
    sorted order, one per failure. Any other mode builds the file name from
    the template, class name and test title.
    """
    directory: Path
    template: str
    mode: str
    extension: str = "png"
    queue: List[str] = field(default_factory=list)

    @classmethod
    def for_suite(cls, options: ReporterOptions, suite_title: str, cwd: Optional[str] = None) -> Optional["ScreenshotLocator"]:
        mode = options.screenshot_mode
        if mode == "off":
            return None
        directory = Path(cwd or os.getcwd()) / (options.report_path or "")
        if not directory.is_dir():
            # report_path names the XML file; screenshots sit beside it
            directory = directory.parent
        template = options.image_prefix or escape(suite_title)
        queue: List[str] = []
        if mode == "loop":
            queue = sorted(n for n in os.listdir(directory) if template in n)
        return cls(directory, template, mode, options.image_extension, queue)

    def next_path(self, class_name: str, title: str) -> Optional[Path]:
        if self.mode == "loop":
            if not self.queue:
                return None
            return self.directory / self.queue.pop(0)
        return self.directory / f"{self.template}{class_name}{title}.{self.extension}"
