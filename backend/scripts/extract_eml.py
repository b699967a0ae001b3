#!/usr/bin/env python3
"""
Run the order extraction engine against saved .eml files.

Prints the OrderDraft (as JSON) or the reason no order was extracted,
followed by the per-stage trace when requested.

Usage:
    # Extract a single email
    python extract_eml.py path/to/order.eml

    # Several emails, with the stage-by-stage trace
    python extract_eml.py emails/*.eml --trace

    # Summary only
    python extract_eml.py emails/*.eml --summary
"""

import argparse
import json
import os
import sys
from collections import Counter
from email import policy
from email.parser import BytesParser
from email.utils import parsedate_to_datetime

from dotenv import load_dotenv

# Add backend to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Load environment
load_dotenv()

from mailorder.models import InboundEmail
from mailorder.order_parsing import extract_with_trace


def _body_part(message, subtype):
    part = message.get_body(preferencelist=(subtype,))
    if part is None:
        return ""
    try:
        return part.get_content()
    except (LookupError, UnicodeDecodeError):
        payload = part.get_payload(decode=True) or b""
        return payload.decode("utf-8", errors="replace")


def load_eml(path):
    """Parse an .eml file into an InboundEmail."""
    with open(path, "rb") as f:
        message = BytesParser(policy=policy.default).parse(f)

    received_at = None
    if message["Date"]:
        try:
            received_at = parsedate_to_datetime(str(message["Date"]))
        except (TypeError, ValueError):
            received_at = None

    return InboundEmail(
        sender=str(message["From"] or ""),
        subject=str(message["Subject"] or ""),
        html_body=_body_part(message, "html"),
        text_body=_body_part(message, "plain"),
        received_at=received_at,
        provider_message_id=str(message["Message-ID"] or os.path.basename(path)),
    )


def extract_file(path, show_trace=False, quiet=False):
    """
    Extract one .eml file.

    Returns:
        Outcome string of the extraction
    """
    email = load_eml(path)
    draft, trace = extract_with_trace(email)

    if not quiet:
        print("\n" + "=" * 70)
        print(f"📧 {os.path.basename(path)}")
        print(f"   From:    {email.sender}")
        print(f"   Subject: {email.subject}")
        print("=" * 70)
        if draft is not None:
            print(json.dumps(draft.as_record(), ensure_ascii=False, indent=2))
        else:
            print(f"⚠️  No order extracted ({trace.outcome})")

        if show_trace:
            print("\nTrace:")
            for event in trace.events:
                context = f" {event.context}" if event.context else ""
                print(f"  [{event.stage:10s}] {event.message}{context}")

    return trace.outcome


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Extract orders from saved transactional emails"
    )
    parser.add_argument("paths", nargs="+", help=".eml files to extract")
    parser.add_argument(
        "--trace", action="store_true", help="Print the per-stage extraction trace"
    )
    parser.add_argument(
        "--summary", action="store_true", help="Only print outcome counts"
    )

    args = parser.parse_args()

    try:
        outcomes = Counter(
            extract_file(path, show_trace=args.trace, quiet=args.summary)
            for path in args.paths
        )

        print("\n" + "=" * 70)
        print("📊 EXTRACTION SUMMARY")
        print("=" * 70)
        for outcome, count in outcomes.most_common():
            print(f"  {outcome:20s}: {count:4d}")
        print("=" * 70)

        sys.exit(0)

    except KeyboardInterrupt:
        print("\n⚠️  Extraction interrupted by user")
        sys.exit(1)
    except Exception as e:
        print(f"❌ Fatal error: {e}")
        sys.exit(1)
