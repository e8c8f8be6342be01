"""
PDF guest-list report: renders an HTML page to PDF with headless Chromium.

Pipeline:
1. Summarize the rows and build a self-contained HTML document (Jinja2
   template with embedded CSS; every guest-supplied string is escaped)
2. Launch Chromium through Playwright using a LaunchProfile picked for the
   current environment (hosted serverless vs. developer machine)
3. Load the HTML, wait for the network to go idle (the footer logo is
   remote), and print it to an A4 PDF with backgrounds

The browser is a per-call resource. browser_session() closes it on every
exit path, including when loading or printing raises, so a failed render
never leaves a Chromium process behind. Failures come out as
ReportRenderError; a partial or empty PDF is never returned.
"""

import logging
import sys
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from jinja2 import Environment
from playwright.async_api import async_playwright

from app.config import Settings, settings
from app.services.report_data import (
    COLUMN_HEADERS,
    EVENT_NAME,
    NO,
    YES,
    GuestRSVP,
    ReportRenderError,
    ReportSummary,
    format_generated_at,
)
from app.services.summary import summarize

logger = logging.getLogger(__name__)

BRAND_LOGO_URL = "https://storage.googleapis.com/joseyrosaura/dw-gray-logo.svg"

# page.pdf() options. prefer_css_page_size lets the @page rule in the
# template win over format when both are given.
PDF_OPTIONS = {
    "format": "A4",
    "print_background": True,
    "margin": {"top": "16mm", "right": "14mm", "bottom": "16mm", "left": "14mm"},
    "prefer_css_page_size": True,
}

DEFAULT_VIEWPORT = {"width": 1920, "height": 1080}

# Flags serverless hosts need: no setuid sandbox, no zygote, no /dev/shm,
# everything in one process.
HOSTED_ARGS = (
    "--allow-pre-commit-input",
    "--disable-background-networking",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-breakpad",
    "--disable-client-side-phishing-detection",
    "--disable-component-update",
    "--disable-default-apps",
    "--disable-dev-shm-usage",
    "--disable-extensions",
    "--disable-gpu",
    "--disable-hang-monitor",
    "--disable-ipc-flooding-protection",
    "--disable-popup-blocking",
    "--disable-prompt-on-repost",
    "--disable-renderer-backgrounding",
    "--disable-sync",
    "--hide-scrollbars",
    "--metrics-recording-only",
    "--mute-audio",
    "--no-first-run",
    "--no-sandbox",
    "--no-zygote",
    "--single-process",
)

LOCAL_ARGS = ("--no-sandbox", "--disable-setuid-sandbox")

# Well-known Chrome install locations, checked in order
LOCAL_BROWSER_PATHS = {
    "darwin": ("/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",),
    "linux": (
        "/usr/bin/google-chrome",
        "/usr/bin/google-chrome-stable",
        "/usr/bin/chromium",
        "/usr/bin/chromium-browser",
    ),
    "win32": (
        r"C:\Program Files\Google\Chrome\Application\chrome.exe",
        r"C:\Program Files (x86)\Google\Chrome\Application\chrome.exe",
    ),
}


# ------------------------------------------------------------------
# LAUNCH PROFILES
# ------------------------------------------------------------------

@dataclass(frozen=True)
class LaunchProfile:
    """How to start Chromium in a given environment.

    executable_path=None means Playwright's own pinned Chromium build,
    downloaded once by `playwright install chromium` and cached.
    """

    name: str
    args: tuple[str, ...]
    executable_path: Optional[str] = None
    headless: bool = True
    viewport: dict = field(default_factory=lambda: dict(DEFAULT_VIEWPORT))

    def launch_options(self) -> dict:
        options = {"headless": self.headless, "args": list(self.args)}
        if self.executable_path:
            options["executable_path"] = self.executable_path
        return options


def resolve_launch_profile(
    config: Optional[Settings] = None,
    platform: Optional[str] = None,
) -> LaunchProfile:
    """Pick the hosted or local profile from the environment."""
    config = config or settings
    override = config.CHROMIUM_EXECUTABLE_PATH or None

    if config.is_hosted:
        return LaunchProfile(name="hosted", args=HOSTED_ARGS, executable_path=override)

    return LaunchProfile(
        name="local",
        args=LOCAL_ARGS,
        executable_path=override or _find_local_browser(platform or sys.platform),
    )


def _find_local_browser(platform: str) -> Optional[str]:
    """First installed Chrome/Chromium for this OS, or None."""
    for key, candidates in LOCAL_BROWSER_PATHS.items():
        if platform.startswith(key):
            for candidate in candidates:
                if Path(candidate).exists():
                    return candidate
    return None


# ------------------------------------------------------------------
# RENDERING ENGINE
# ------------------------------------------------------------------

class PlaywrightEngine:
    """Starts the Playwright driver and launches Chromium.

    One instance per render. launch() returns the Browser; stop() shuts
    the driver down after the browser is closed.
    """

    def __init__(self):
        self._playwright = None

    async def launch(self, profile: LaunchProfile):
        self._playwright = await async_playwright().start()
        try:
            return await self._playwright.chromium.launch(**profile.launch_options())
        except Exception:
            await self.stop()
            raise

    async def stop(self) -> None:
        if self._playwright is not None:
            playwright, self._playwright = self._playwright, None
            await playwright.stop()


@asynccontextmanager
async def browser_session(profile: LaunchProfile, engine=None):
    """Launch a browser and guarantee it is closed when the block exits.

    A failure while closing is logged and swallowed so it can't hide the
    error that made the block exit in the first place.
    """
    engine = engine or PlaywrightEngine()
    browser = await engine.launch(profile)
    logger.debug("Browser launched", extra={"profile": profile.name})
    try:
        yield browser
    finally:
        try:
            await browser.close()
        except Exception as e:
            logger.warning("Failed to close browser: %s", e, exc_info=True)
        finally:
            # Runs even if close() was cancelled by a timeout
            try:
                await engine.stop()
            except Exception as e:
                logger.warning("Failed to stop rendering engine: %s", e, exc_info=True)


# ------------------------------------------------------------------
# PUBLIC API
# ------------------------------------------------------------------

async def render_pdf(
    rows: Sequence[GuestRSVP],
    generated_at: Optional[datetime] = None,
    *,
    engine=None,
    profile: Optional[LaunchProfile] = None,
) -> bytes:
    """Render the guest list to PDF bytes.

    Args:
        rows: Guest rows, already in display order.
        generated_at: Timestamp printed in the header (defaults to now).
        engine: Rendering engine; defaults to a fresh PlaywrightEngine.
        profile: Launch profile; defaults to resolve_launch_profile().

    Raises:
        ReportRenderError: launch, page load or export failed, or the
            browser produced an empty document.
    """
    generated_at = generated_at or datetime.now()
    summary = summarize(rows)
    html = build_guest_list_html(rows, summary, format_generated_at(generated_at))
    profile = profile or resolve_launch_profile()

    try:
        async with browser_session(profile, engine) as browser:
            page = await browser.new_page(
                viewport=profile.viewport,
                device_scale_factor=1,
                ignore_https_errors=True,
            )
            await page.set_content(html, wait_until="networkidle")
            pdf_bytes = await page.pdf(**PDF_OPTIONS)
    except Exception as e:
        logger.error("PDF generation failed: %s", e, exc_info=True,
                     extra={"profile": profile.name})
        raise ReportRenderError(f"Could not render guest-list PDF: {e}") from e

    if not pdf_bytes:
        raise ReportRenderError("Browser returned an empty PDF")

    return pdf_bytes


def build_guest_list_html(
    rows: Sequence[GuestRSVP],
    summary: ReportSummary,
    generated_on: str,
) -> str:
    """Build the HTML document that gets printed to PDF.

    Autoescaping covers & < > " ' in every interpolated value, so guest
    names, phones and notes can't inject markup.
    """
    return _TEMPLATE.render(
        event_name=EVENT_NAME,
        generated_on=generated_on,
        headers=COLUMN_HEADERS,
        cards=[
            ("Invitados registrados", summary.total),
            ("Confirmados", summary.confirmed),
            ("Pendientes", summary.pending),
            ("# Total invitados declarados", summary.guests),
        ],
        rows=[_table_row(row) for row in rows],
        logo_url=BRAND_LOGO_URL,
    )


def _table_row(row: GuestRSVP) -> dict:
    count = row.known_guest_count
    return {
        "full_name": row.full_name or "",
        "guests": "-" if count is None else count,
        "phone": row.phone or "—",
        "notes": row.notes or "—",
        "attending": row.attending,
        "answer": YES if row.attending else NO,
    }


_ENV = Environment(autoescape=True, trim_blocks=True, lstrip_blocks=True)

_TEMPLATE = _ENV.from_string("""\
<!doctype html>
<html lang="es">
  <head>
    <meta charset="UTF-8" />
    <title>Invitados | {{ event_name }}</title>
    <style>
      @page { size: A4; margin: 16mm 14mm; }
      :root {
        --brand: #00674f;
        --brand-soft: #e8f4f0;
        --text: #1f1a17;
        --muted: #5d514b;
        --border: #e6dcd5;
      }
      * { box-sizing: border-box; }
      body {
        margin: 0;
        font-family: "IBM Plex Serif", "Segoe UI", "Helvetica Neue", Arial, sans-serif;
        color: var(--text);
      }
      .page { padding: 20px 10px 10px; }
      header {
        display: flex;
        justify-content: space-between;
        align-items: flex-start;
        gap: 16px;
        margin-bottom: 16px;
      }
      h1 {
        margin: 0 0 6px;
        font-size: 22px;
        color: var(--brand);
        letter-spacing: 0.03em;
      }
      p { margin: 0; color: var(--muted); font-size: 12px; }
      .pill {
        display: inline-block;
        padding: 6px 10px;
        border-radius: 999px;
        background: var(--brand-soft);
        color: var(--brand);
        font-weight: 600;
        font-size: 11px;
        letter-spacing: 0.04em;
        text-transform: uppercase;
        margin-bottom: 16px;
      }
      .meta {
        display: grid;
        grid-template-columns: repeat(auto-fit, minmax(140px, 1fr));
        gap: 8px;
        margin: 10px 0 16px;
      }
      .meta-card {
        background: white;
        border: 1px solid var(--border);
        border-radius: 10px;
        padding: 10px 12px;
        box-shadow: 0 6px 20px rgba(0, 0, 0, 0.04);
      }
      .meta-title {
        font-size: 11px;
        text-transform: uppercase;
        letter-spacing: 0.03em;
        color: var(--muted);
        margin: 0 0 4px;
      }
      .meta-value { margin: 0; font-size: 18px; color: var(--text); font-weight: 600; }
      table { width: 100%; border-collapse: collapse; border: 1px solid var(--border); }
      thead th {
        text-align: left;
        padding: 10px 12px;
        font-size: 12px;
        letter-spacing: 0.02em;
        text-transform: uppercase;
        background: var(--brand-soft);
        color: var(--brand);
        border-bottom: 1px solid var(--border);
      }
      td { padding: 10px 12px; font-size: 12px; line-height: 1.4; color: var(--text); }
      tbody tr.striped td { background: #f4fefa; }
      td:last-child { font-weight: 700; }
      td.yes { color: #0f7b5c; }
      td.no { color: #b3532f; }
      footer { margin-top: 32px; text-align: center; font-size: 10px; color: var(--muted); }
      footer img { width: 100px; height: auto; object-fit: contain; }
      footer p { font-size: 8px; margin-top: 8px; }
    </style>
  </head>
  <body>
    <div class="page">
      <header>
        <div>
          <span class="pill">Lista de invitados con RSVP</span>
          <h1 class="title">{{ event_name }}</h1>
          <p>Lista de invitados generada: {{ generated_on }}</p>
        </div>
      </header>

      <div class="meta">
{% for title, value in cards %}
        <div class="meta-card">
          <p class="meta-title">{{ title }}</p>
          <p class="meta-value">{{ value }}</p>
        </div>
{% endfor %}
      </div>

      <table>
        <thead>
          <tr>
{% for header in headers %}
            <th>{{ header }}</th>
{% endfor %}
          </tr>
        </thead>
        <tbody>
{% for row in rows %}
          <tr class="{{ 'striped' if loop.index0 is even else '' }}">
            <td>{{ row.full_name }}</td>
            <td>{{ row.guests }}</td>
            <td>{{ row.phone }}</td>
            <td>{{ row.notes }}</td>
            <td class="{{ 'yes' if row.attending else 'no' }}">{{ row.answer }}</td>
          </tr>
{% else %}
          <tr><td colspan="{{ headers | length }}">No hay invitados aún.</td></tr>
{% endfor %}
        </tbody>
      </table>

      <footer>
        <img src="{{ logo_url }}" alt="DevWorks Studios" />
        <p>{{ event_name }} 2026 | Documento por DevWorks Studios | Generado automáticamente para uso interno.</p>
      </footer>
    </div>
  </body>
</html>
""")
