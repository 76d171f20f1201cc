"""
Command-line interface for the link verifier.
"""
from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from link_verifier.core import (
    DEFAULT_BASE_URL,
    DEFAULT_USER_AGENT,
    Broken,
    Good,
    Outcome,
    RunReport,
    VerifierConfig,
    extract_links,
    fetch_page,
    make_session,
    partition_links,
    verify_links,
)

RULE = "=" * 60


def print_outcome(outcome: Outcome) -> None:
    """Print single verification result line."""
    if isinstance(outcome, Good):
        line = f"✅ [{outcome.status}] {outcome.link}"
    elif isinstance(outcome, Broken):
        detail = outcome.reason or "BROKEN LINK DETECTED"
        line = f"❌ [{outcome.status}] {outcome.link} ({detail})"
    else:
        line = f"⚠️  [ERR] {outcome.link} - {outcome.error}"
    sys.stdout.write(line + "\n")
    sys.stdout.flush()


def print_summary(report: RunReport) -> None:
    """Print verification summary, with details for every failure."""
    out = sys.stdout
    out.write("\n" + RULE + "\n")
    out.write("\n📊 SUMMARY REPORT\n\n")
    out.write(f"   ✅ Working links: {len(report.good)}\n")
    out.write(f"   ❌ Broken links:  {len(report.broken)}\n")
    out.write(f"   ⚠️  Errors:       {len(report.errors)}\n")
    out.write(f"   📝 Total checked: {report.checked}\n")

    if report.broken:
        out.write("\n" + RULE + "\n")
        out.write("\n🚨 BROKEN LINKS FOUND:\n\n")
        for item in report.broken:
            reason = f" | Reason: {item.reason}" if item.reason else ""
            out.write(f"   ❌ {item.link}\n")
            out.write(f"      Status: {item.status}{reason}\n")

    if report.errors:
        out.write("\n" + RULE + "\n")
        out.write("\n⚠️  CONNECTION ERRORS:\n\n")
        for item in report.errors:
            out.write(f"   ⚠️  {item.link}\n")
            out.write(f"      Error: {item.error}\n")

    if report.exit_code == 0:
        out.write("\n🎉 All links are working correctly!\n\n")

    out.write(RULE + "\n\n")


def run(config: VerifierConfig) -> int:
    """Fetch the seed page, verify every internal link on it and report."""
    out = sys.stdout
    out.write("🔍 Link Crawler Starting...\n\n")
    out.write(f"📍 Base URL: {config.base_url}\n\n")
    out.write(RULE + "\n\n")

    session = make_session(config)

    out.write("📥 Fetching homepage...\n\n")
    homepage = fetch_page(session, config.base_url, config)
    if not homepage.ok:
        sys.stderr.write("❌ FATAL: Could not fetch homepage!\n")
        sys.stderr.write(f"   Status: {homepage.status}\n")
        if homepage.error:
            sys.stderr.write(f"   Error: {homepage.error}\n")
        sys.stderr.write("\n⚠️  Make sure your dev server is running: npm run dev\n\n")
        return 1

    out.write(f"✅ Homepage fetched successfully (Status: {homepage.status})\n\n")

    all_links = extract_links(homepage.body)
    out.write(f"📝 Found {len(all_links)} total links on homepage\n\n")

    internal, external = partition_links(all_links, config)
    report = RunReport(total_links=len(all_links), external_links=external)

    out.write(f"🔗 Internal links to verify: {len(internal)}\n")
    out.write(f"🌐 External links (skipped): {len(external)}")
    if report.denylisted:
        out.write(f" ({report.denylisted} social/messaging)")
    out.write("\n\n" + RULE + "\n\n")
    out.flush()

    verify_links(session, internal, config, report=report, on_outcome=print_outcome)

    print_summary(report)
    return report.exit_code


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the link verifier CLI."""
    parser = argparse.ArgumentParser(
        description=(
            "Verify every internal link on a locally served storefront homepage. "
            "All options are optional and only override the built-in defaults."
        )
    )
    parser.add_argument(
        "--base-url", default=DEFAULT_BASE_URL, help=f"Site to verify (default: {DEFAULT_BASE_URL})"
    )
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header")
    parser.add_argument(
        "--timeout", type=float, default=None, help="Request timeout in seconds (default: none)"
    )
    args = parser.parse_args(argv)

    config = VerifierConfig(
        base_url=args.base_url,
        user_agent=args.user_agent,
        timeout_s=args.timeout,
    )
    return run(config)


if __name__ == "__main__":
    raise SystemExit(main())
