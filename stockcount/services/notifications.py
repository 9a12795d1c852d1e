"""
Email notifications for the weekly count cycle.

The core never depends on delivery: every send method returns True/False and
logs failures instead of raising, so a broken mail server cannot undo or
block a recorded submission or a computed report.
"""
from __future__ import annotations

import logging
import smtplib
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from typing import Any, Mapping, Sequence

from stockcount.config import Settings
from stockcount.services.reports import FLAG_EXCESS, FLAG_LOSS

logger = logging.getLogger("stockcount")

_ROW_COLORS = {FLAG_LOSS: "#f8d7da", FLAG_EXCESS: "#fff3cd"}
_CELL = "padding:6px 8px;border:1px solid #ddd;"


class Notifier:
    """Delivery channel used by the scheduled jobs."""

    def send_store_reminder(self, store: Mapping[str, Any], week_key: str) -> bool:
        raise NotImplementedError

    def send_admin_status_summary(self, status: Sequence[Mapping[str, Any]], week_key: str) -> bool:
        raise NotImplementedError

    def send_pilferage_report(self, report: Mapping[str, Any]) -> bool:
        raise NotImplementedError


def _fmt_qty(v: Any) -> str:
    if v is None:
        return "-"
    f = float(v)
    return f"{f:g}"


# ------------------------------------------------------------- rendering


def render_store_reminder(store: Mapping[str, Any], week_key: str, app_url: str) -> str:
    return f"""
    <html><body style="font-family: Arial, sans-serif; color: #333;">
    <h2 style="color: #dc3545;">Stock Count Pending</h2>
    <p>Dear <strong>{escape(str(store.get("manager_name") or "Manager"))}</strong>,</p>
    <p>The weekly stock count for <strong>{escape(str(store["store_name"]))}</strong>
    (week of <strong>{escape(week_key)}</strong>) has <strong>not been submitted</strong>.</p>
    <p>Deadline: <strong>Monday, end of day</strong>.</p>
    <p><a href="{escape(app_url)}">Submit the count now</a></p>
    </body></html>
    """


def render_status_summary(status: Sequence[Mapping[str, Any]], week_key: str) -> str:
    submitted = [s for s in status if s["submitted"]]
    missing = [s for s in status if not s["submitted"]]

    rows = []
    for s in missing:
        rows.append(
            f'<tr style="background:#f8d7da;"><td style="{_CELL}">{escape(str(s["store_name"]))}</td>'
            f'<td style="{_CELL}">{escape(str(s.get("manager_name") or "-"))}</td>'
            f'<td style="{_CELL}">Missing</td></tr>'
        )
    for s in submitted:
        rows.append(
            f'<tr style="background:#d4edda;"><td style="{_CELL}">{escape(str(s["store_name"]))}</td>'
            f'<td style="{_CELL}">{escape(str(s.get("manager_name") or "-"))}</td>'
            f'<td style="{_CELL}">Submitted ({escape(str(s.get("submitted_by") or ""))})</td></tr>'
        )

    return f"""
    <html><body style="font-family: Arial, sans-serif; color: #333;">
    <h2>Stock Count Status</h2>
    <p>Week of {escape(week_key)}</p>
    <h3>{len(submitted)}/{len(status)} Stores Submitted</h3>
    <table style="width:100%;border-collapse:collapse;">
      <tr style="background:#343a40;color:#fff;">
        <th style="{_CELL}">Store</th><th style="{_CELL}">Manager</th><th style="{_CELL}">Status</th>
      </tr>
      {"".join(rows)}
    </table>
    </body></html>
    """


def render_pilferage_report(report: Mapping[str, Any]) -> str:
    summary = report["summary"]
    headers = ["Store", "Product", "Opening", "Received", "Sold", "Expected", "Physical", "Variance", "Var%", "Flag"]

    rows = []
    for r in report["data"]:
        bg = _ROW_COLORS.get(r["flag"], "#d4edda")
        cells = [
            escape(str(r["store_name"])),
            escape(str(r["product_name"])),
            _fmt_qty(r["opening"]),
            _fmt_qty(r["received"]),
            _fmt_qty(r["sold"]),
            _fmt_qty(r["expected_closing"]),
            _fmt_qty(r["physical_count"]),
            f"<strong>{_fmt_qty(r['variance'])}</strong>",
            f"{r['variance_pct']}%",
            r["flag"],
        ]
        rows.append(f'<tr style="background:{bg};">' + "".join(f'<td style="{_CELL}">{c}</td>' for c in cells) + "</tr>")

    return f"""
    <html><body style="font-family: Arial, sans-serif; color: #333;">
    <h2>Weekly Pilferage &amp; Loss Report</h2>
    <p>Week of {escape(str(report["week_start"]))} (compared with {escape(str(report["prev_week"]))})</p>
    <p>
      Items tracked: <strong>{summary["total_items"]}</strong> &bull;
      Loss items: <strong>{summary["loss_items"]}</strong> &bull;
      Total loss qty: <strong>{_fmt_qty(summary["total_loss_qty"])}</strong> &bull;
      Excess items: <strong>{summary["excess_items"]}</strong>
    </p>
    <table style="width:100%;border-collapse:collapse;font-size:12px;">
      <tr style="background:#343a40;color:#fff;">{"".join(f'<th style="{_CELL}">{h}</th>' for h in headers)}</tr>
      {"".join(rows)}
    </table>
    <p style="color: #666; font-size: 11px;">Auto-generated {datetime.now().strftime('%m/%d/%Y %I:%M %p')}</p>
    </body></html>
    """


# ------------------------------------------------------------------ SMTP


class SmtpNotifier(Notifier):
    def __init__(self, settings: Settings, *, timeout: float = 30.0):
        self.settings = settings
        self.timeout = timeout

    def _send(self, to: Sequence[str], subject: str, html: str) -> bool:
        if not self.settings.email_enabled:
            logger.warning("Email not configured (set SMTP_USER and SMTP_PASS); skipped: %s", subject)
            return False
        if not to:
            logger.warning("No recipients; skipped: %s", subject)
            return False

        msg = MIMEMultipart("alternative")
        msg["From"] = self.settings.email_from or self.settings.smtp_user
        msg["To"] = ", ".join(to)
        msg["Subject"] = subject
        msg.attach(MIMEText(html, "html", "utf-8"))

        try:
            with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=self.timeout) as server:
                server.starttls()
                server.login(self.settings.smtp_user, self.settings.smtp_password)
                server.sendmail(msg["From"], list(to), msg.as_string())
        except (smtplib.SMTPException, OSError):
            logger.exception("Email failed (%s): %s", ", ".join(to), subject)
            return False

        logger.info("Email sent to %s: %s", ", ".join(to), subject)
        return True

    def send_store_reminder(self, store: Mapping[str, Any], week_key: str) -> bool:
        email = store.get("manager_email")
        if not email:
            logger.info("Store %s has no manager email; reminder skipped", store.get("store_id"))
            return False
        html = render_store_reminder(store, week_key, self.settings.app_url)
        return self._send([email], f"Stock Count Pending - {store['store_name']}", html)

    def send_admin_status_summary(self, status: Sequence[Mapping[str, Any]], week_key: str) -> bool:
        n_submitted = sum(1 for s in status if s["submitted"])
        subject = f"Stock Status: {n_submitted}/{len(status)} - Week {week_key}"
        return self._send(self.settings.admin_emails, subject, render_status_summary(status, week_key))

    def send_pilferage_report(self, report: Mapping[str, Any]) -> bool:
        summary = report["summary"]
        subject = (
            f"Pilferage Report - Week {report['week_start']} | "
            f"{summary['loss_items']} Losses, {_fmt_qty(summary['total_loss_qty'])} Units"
        )
        return self._send(self.settings.report_emails, subject, render_pilferage_report(report))
