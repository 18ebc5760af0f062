import html
import socket
import subprocess
import sys
from email.message import EmailMessage
from typing import List

EMAIL_TITLE = "DevStats <=> landscape sync status"
SENDER_USER = "devstats-landscape-sync"

HTML_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>{title}</title>
</head>
<body>
{body}
</body>
</html>
"""


def parse_recipients(value: str) -> List[str]:
    return [r.strip() for r in (value or "").split(",") if r.strip()]


def render_html(body: str, title: str = EMAIL_TITLE) -> str:
    lines = [html.escape(line) for line in body.splitlines()]
    return HTML_TEMPLATE.format(title=html.escape(title), body="<br/>\n".join(lines))


def build_message(body: str, recipient: str, hostname: str) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = f"{SENDER_USER}@{hostname}.io"
    msg["To"] = recipient
    msg["Subject"] = EMAIL_TITLE
    msg.set_content(render_html(body), subtype="html")
    return msg


def send_status_email(body: str, recipients: List[str]) -> int:
    """
    Send the report to each recipient through the local sendmail binary.
    Returns the number of recipients it was delivered to; failures are printed and skipped.
    """
    if not recipients:
        print("[WARN] No e-mail recipients configured, not sending the report.", file=sys.stderr)
        return 0
    print(f"[INFO] Sending email(s) to {', '.join(recipients)}")
    hostname = socket.gethostname()
    sent = 0
    for recipient in recipients:
        msg = build_message(body, recipient, hostname)
        try:
            result = subprocess.run(
                ["sendmail", recipient],
                input=msg.as_string(),
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as err:
            print(f"[WARN] Error sending email to {recipient}: {err}", file=sys.stderr)
            continue
        if result.returncode != 0:
            print(f"[WARN] Error sending email to {recipient}: exit code {result.returncode}", file=sys.stderr)
            if result.stdout:
                print(f"STDOUT:\n{result.stdout}", file=sys.stderr)
            if result.stderr:
                print(f"STDERR:\n{result.stderr}", file=sys.stderr)
            continue
        print(f"[INFO] Sent email to {recipient}")
        sent += 1
    return sent
