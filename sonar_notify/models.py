"""Data models for a single webhook notification.

    - Measures     metric values fetched from ``/api/measures/component``
    - ScanContext  everything known about one scan, built stage by stage

Both are frozen: each stage returns a new object instead of mutating fields
written by an earlier stage.
"""

from dataclasses import dataclass, field, fields, replace

PULL_REQUEST = "PULL_REQUEST"


@dataclass(frozen=True)
class Measures:
    # Overall code
    alert_status: str = ""
    bugs: str = ""
    code_smells: str = ""
    vulnerabilities: str = ""
    coverage: str = ""
    duplicated_lines_density: str = ""

    # New code
    new_bugs: str = ""
    new_code_smells: str = ""
    new_vulnerabilities: str = ""
    new_coverage: str = ""
    new_duplicated_lines_density: str = ""


#: SonarQube metric keys requested for every scan, in request order
METRIC_KEYS: tuple[str, ...] = tuple(f.name for f in fields(Measures))


@dataclass(frozen=True)
class ScanContext:
    access_token: str
    sonar_token: str = ""

    server_url: str = ""
    project_name: str = ""
    project_key: str = ""
    project_url: str = ""

    branch_name: str = ""
    branch_url: str = ""
    branch_type: str = ""

    measures: Measures = field(default_factory=Measures)

    @property
    def is_pull_request(self) -> bool:
        return self.branch_type == PULL_REQUEST

    @property
    def passed(self) -> bool:
        """True when the quality gate status is ``OK``."""
        return self.measures.alert_status == "OK"

    @property
    def dashboard_url(self) -> str:
        return f"{self.server_url}/dashboard?id={self.project_key}"

    def with_measures(self, measures: Measures) -> "ScanContext":
        return replace(self, measures=measures)
