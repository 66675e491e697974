"""Pattern-based scan for leaked secrets and risky code constructs."""

import re
from typing import NamedTuple

from repo_health_guard.models import RepositoryFile

SECRET_PATTERNS = [
    (
        "API Key",
        re.compile(
            r"""['"]?(?:api[_-]?key|api[_-]?secret|access[_-]?key|auth[_-]?token)['"]?\s*[:=]\s*['"][\w\-+=]{16,}['"]""",
            re.IGNORECASE,
        ),
    ),
    ("AWS Key", re.compile(r"AKIA[0-9A-Z]{16}")),
    ("Private Key", re.compile(r"-----BEGIN (?:RSA |DSA |EC )?PRIVATE KEY-----")),
    (
        "Generic Token",
        re.compile(
            r"""['"]?\btoken['"]?\s*[:=]\s*['"][\w\-+=]{16,}['"]""", re.IGNORECASE
        ),
    ),
    (
        "Password",
        re.compile(
            r"""['"]?\bpassword['"]?\s*[:=]\s*['"][^'"\n]{8,}['"]""", re.IGNORECASE
        ),
    ),
]

VULNERABILITY_PATTERNS = [
    (
        "SQL Injection Risk",
        re.compile(r"""(?:executeQuery|query)\s*\(\s*[`'"][^'"`]*(?:\$\{|['"`]\s*\+)"""),
    ),
    (
        "XSS Risk",
        re.compile(r"(?:innerHTML|outerHTML)\s*=(?!=)|dangerouslySetInnerHTML"),
    ),
    (
        "Insecure Cookie",
        re.compile(r"document\.cookie\s*=(?!=)|cookies\.set\([^)]+secure:\s*false"),
    ),
    ("Eval Usage", re.compile(r"\beval\s*\(|\bFunction\s*\(")),
    ("Insecure Random", re.compile(r"Math\.random\s*\(")),
]

SCANNED_SOURCE_EXTENSIONS = (".js", ".jsx", ".ts", ".tsx", ".php", ".py", ".rb")


class SecurityFinding(NamedTuple):
    path: str
    kind: str
    category: str  # "secret" or "vulnerability"


class SecurityMetrics(NamedTuple):
    vulnerability_count: int
    exposed_secrets_count: int
    avg_patch_time: float  # hours
    findings: list[SecurityFinding]
    files_scanned: int = 0


def find_exposed_secrets(content: str) -> list[str]:
    """Return one entry per secret-looking match, labelled by type."""
    secrets = []
    for kind, pattern in SECRET_PATTERNS:
        secrets.extend(kind for _ in pattern.finditer(content or ""))
    return secrets


def find_vulnerabilities(path: str, content: str) -> list[str]:
    """Return risky constructs found in source files; other files are skipped."""
    if not path.lower().endswith(SCANNED_SOURCE_EXTENSIONS):
        return []
    vulnerabilities = []
    for kind, pattern in VULNERABILITY_PATTERNS:
        vulnerabilities.extend(kind for _ in pattern.finditer(content or ""))
    return vulnerabilities


def analyze_security(files: list[RepositoryFile]) -> SecurityMetrics:
    findings: list[SecurityFinding] = []
    for file in files:
        findings.extend(
            SecurityFinding(file.path, kind, "secret")
            for kind in find_exposed_secrets(file.content)
        )
        findings.extend(
            SecurityFinding(file.path, kind, "vulnerability")
            for kind in find_vulnerabilities(file.path, file.content)
        )

    return SecurityMetrics(
        vulnerability_count=sum(1 for f in findings if f.category == "vulnerability"),
        exposed_secrets_count=sum(1 for f in findings if f.category == "secret"),
        # No upstream source for patch latency yet
        avg_patch_time=0.0,
        findings=findings,
        files_scanned=len(files),
    )
