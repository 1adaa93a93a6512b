from pydantic import BaseModel, Field, ValidationError
from typing import Optional, Union, Mapping, Any, Dict
import os, yaml, pathlib
from .errors import ConfigurationError

# Environment variables win over the options file, CLI flags win over both.
ENV_OPTIONS = {
    "JUNIT_REPORT_STACK": "include_stack",
    "JUNIT_REPORT_PATH": "report_path",
    "JUNIT_REPORT_NAME": "report_name",
    "JUNIT_REPORT_PACKAGES": "package_naming",
    "JENKINS_REPORTER_ENABLE_SONAR": "sonar_naming",
    "JENKINS_REPORTER_TEST_DIR": "test_root_dir",
}

class ReporterOptions(BaseModel):
    report_path: Optional[str] = Field(None, description="Report file, or directory to drop <epoch-millis>.xml into")
    report_name: str = Field("Mocha Tests", description="name attribute of <testsuites>")
    include_stack: bool = Field(False, description="Append stack traces to failure bodies")
    package_naming: bool = Field(False, description="classname = test package + suite title")
    sonar_naming: bool = Field(False, description="classname = test file path relative to test_root_dir")
    test_root_dir: str = Field("test")
    screenshots: Union[bool, str] = Field(False, description="off, loop, or any other value for named screenshots")
    image_prefix: Optional[str] = None
    image_extension: str = Field("png")

    @property
    def screenshot_mode(self) -> str:
        if self.screenshots is False or self.screenshots in ("", "off"):
            return "off"
        if self.screenshots == "loop":
            return "loop"
        return "named"

def _read_file(path: str) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(pathlib.Path(path).read_text()) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to read options file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Options file {path} must contain a mapping")
    table = data.get("junit", data)
    if not isinstance(table, dict):
        raise ConfigurationError(f"'junit' section of {path} must be a mapping")
    return dict(table)

def load_options(path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None, **overrides) -> ReporterOptions:
    data: Dict[str, Any] = _read_file(path) if path else {}
    env = os.environ if environ is None else environ
    for var, key in ENV_OPTIONS.items():
        if env.get(var):
            data[key] = env[var]
    data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return ReporterOptions.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid reporter options: {e}") from e
