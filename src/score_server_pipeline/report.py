"""Check results and report formatting for ``check-all``."""

import json
import time
from collections.abc import Awaitable

from pydantic import BaseModel


class CheckResult(BaseModel):
    """Outcome of a single timed check."""

    stage: str
    name: str
    passed: bool
    message: str = ""
    duration: float = 0.0


def clean_error(error: BaseException) -> str:
    """Error text without the engine's trailing traceparent reference."""
    message = str(error)
    if "traceparent:" in message:
        message = message.split("[traceparent:")[0].strip()
    return message


async def timed_check(stage: str, name: str, check: Awaitable[object]) -> CheckResult:
    """Await a check, recording its duration and turning failures into results."""
    start = time.time()
    try:
        await check
    except Exception as e:
        return CheckResult(
            stage=stage,
            name=name,
            passed=False,
            message=clean_error(e),
            duration=time.time() - start,
        )
    return CheckResult(stage=stage, name=name, passed=True, duration=time.time() - start)


def format_report(results: list[CheckResult]) -> str:
    """Format results into a clear report."""
    lines = [
        "══════════════════════════════════════",
    ]

    all_passed = all(r.passed for r in results)
    status = "PASSED" if all_passed else "FAILED"
    lines.append(f"SCORE-SERVER CHECKS: {status}")
    lines.append("══════════════════════════════════════")

    for r in results:
        icon = "✓" if r.passed else "✗"
        lines.append(f"{icon} {r.stage}: {r.name}".ljust(40) + f"({r.duration:.1f}s)")
        if not r.passed and r.message:
            for msg_line in r.message.split("\n")[:5]:
                lines.append(f"  → {msg_line}")

    lines.append("")
    if all_passed:
        lines.append("Ready to build!")
    else:
        failed_count = sum(1 for r in results if not r.passed)
        lines.append(f"{failed_count} check(s) failed.")

    return "\n".join(lines)


def format_json_report(results: list[CheckResult]) -> str:
    """Format results as JSON for machine parsing."""
    checks: list[dict[str, object]] = []
    for r in results:
        check: dict[str, object] = {
            "stage": r.stage.lower(),
            "name": r.name,
            "status": "passed" if r.passed else "failed",
            "duration": round(r.duration, 2),
        }
        if not r.passed and r.message:
            check["error"] = r.message
        checks.append(check)

    report = {
        "result": "passed" if all(r.passed for r in results) else "failed",
        "checks": checks,
    }
    return json.dumps(report, indent=2)
