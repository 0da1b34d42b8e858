"""Table-mode normalization: model JSON -> exact ``rows`` x ``cols`` table.

Parsing is best effort. Whatever does not come back in the requested shape is
replaced by synthesized headers (picked from the prompt's domain keywords) and
synthesized rows (picked from each header's wording).
"""
from __future__ import annotations
import random
import re
from datetime import datetime, timedelta, timezone
from typing import Callable, Sequence

from wx_relay.common.schema import NormalizedTable
from wx_relay.normalize.json_repair import loads_tolerant, stringify, strip_code_fence

# --- structured parse ---------------------------------------------------------

def parse_table(text: str | None, rows: int, cols: int) -> tuple[list[str], list[list[str]]]:
    """
    Parse ``{"headers": [...], "rows": [[...], ...]}`` out of model text.

    Never raises; returns empty lists when nothing usable was found.
    Rows are cut or padded with "" to ``cols`` cells, but the number of
    headers and rows may still differ from the request.
    """
    rows, cols = max(rows, 0), max(cols, 0)
    headers: list[str] = []
    body: list[list[str]] = []
    if not text:
        return headers, body
    try:
        obj = loads_tolerant(strip_code_fence(text))
    except ValueError:
        return headers, body

    if not isinstance(obj, dict):
        return headers, body
    raw_headers, raw_rows = obj.get("headers"), obj.get("rows")
    if not (isinstance(raw_headers, list) and isinstance(raw_rows, list)):
        return headers, body

    # brackets or braces in a header mean the model nested something
    headers = [
        h for h in (stringify(x) for x in raw_headers)
        if h.strip() and "[" not in h and "{" not in h
    ][:cols]

    for raw in raw_rows:
        cells = [stringify(x) for x in raw] if isinstance(raw, list) else []
        cells = cells[:cols] + [""] * (cols - len(cells))
        if cells:
            body.append(cells)
    return headers, body[:rows]

# --- header fallback ----------------------------------------------------------

USER_HEADERS = [
    "User ID", "Name", "Email", "Role", "Department", "Status",
    "Username", "Phone", "Location", "Manager", "Last Login", "Created At", "Country", "City",
]
PRODUCT_HEADERS = [
    "Product ID", "Name", "Category", "Price", "Stock", "Rating",
    "SKU", "Brand", "Color", "Weight", "Dimensions", "Release Date", "Supplier", "Warehouse",
]
ORDER_HEADERS = [
    "Order ID", "Customer", "Product", "Quantity", "Price", "Date",
    "Status", "Shipping Address", "Payment Method", "Tracking No", "Sales Rep", "Discount", "Tax", "Total",
]
PERFORMANCE_HEADERS = [
    "Application", "Hostname", "Method", "Start Time", "Response Time (ms)", "Load Time (ms)",
    "Downtime (min)", "Status",
    "Region", "SLA (%)", "Error Rate (%)", "CPU (%)", "Memory (%)", "Disk (%)", "Endpoint", "Env",
]

# First entry whose keywords appear in the lower-cased prompt wins.
HEADER_TEMPLATES: list[tuple[tuple[str, ...], list[str]]] = [
    (("user", "management"), USER_HEADERS),
    (("product",), PRODUCT_HEADERS),
    (("order", "sales"), ORDER_HEADERS),
    (("performance", "downtime", "uptime"), PERFORMANCE_HEADERS),
]


def fallback_headers(prompt: str | None, cols: int) -> list[str]:
    """Pick a domain header template for the prompt and fit it to ``cols``."""
    prompt_lower = (prompt or "").lower()
    proposed: list[str] = []
    for keywords, template in HEADER_TEMPLATES:
        if any(k in prompt_lower for k in keywords):
            proposed = template
            break
    headers = list(proposed[:max(cols, 0)])
    while len(headers) < cols:
        headers.append(f"Column {len(headers) + 1}")
    return headers

# --- row fallback -------------------------------------------------------------

FIRST_NAMES = [
    "Liam", "Noah", "Oliver", "Elijah", "James", "William", "Benjamin", "Lucas", "Henry", "Alexander",
    "Emma", "Olivia", "Ava", "Isabella", "Sophia", "Mia", "Charlotte", "Amelia", "Harper", "Evelyn",
]
LAST_NAMES = [
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis", "Rodriguez", "Martinez",
    "Hernandez", "Lopez", "Gonzalez", "Wilson", "Anderson", "Thomas", "Taylor", "Moore", "Jackson", "Martin",
]
ROLES = ["Admin", "Manager", "Editor", "Viewer", "Analyst", "Developer", "Designer", "Support"]
DEPARTMENTS = ["Engineering", "Sales", "Marketing", "Finance", "HR", "Operations", "Customer Success", "IT"]
CITIES = ["New York", "San Francisco", "London", "Berlin", "Paris", "Toronto", "Sydney", "Tokyo"]
HTTP_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH"]
REGIONS = ["us-east-1", "us-west-2", "eu-central-1", "ap-south-1"]
ENVS = ["prod", "staging", "dev"]

_NON_ALPHA = re.compile(r"[^a-z]+")


class _RowContext:
    """Per-row state shared by the cell generators."""

    def __init__(self, index: int, rng: random.Random, now: datetime) -> None:
        self.index = index
        self.rng = rng
        self.now = now
        self.name = random_name(rng)

    def pick(self, choices: Sequence[str]) -> str:
        return self.rng.choice(choices)

    def integer(self, low: int, high: int) -> str:
        return str(self.rng.randint(low, high))

    def percent(self, low: float, high: float) -> str:
        return f"{low + self.rng.random() * (high - low):.1f}"

    def recent(self, days: int) -> datetime:
        return self.now - timedelta(milliseconds=self.rng.randrange(days * 86_400_000))


def random_name(rng: random.Random) -> str:
    return f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}"


def username_from(name: str) -> str:
    return _NON_ALPHA.sub("", name.lower())[:12]


def _is_identifier(h: str) -> bool:
    return "user id" in h or h in ("id", "userid") or ("id" in h and "order" not in h and "product" not in h)


def _phone(ctx: _RowContext) -> str:
    rng = ctx.rng
    return f"+1-{rng.randint(200, 899)}-{rng.randint(200, 899)}-{rng.randint(1000, 9999)}"


Rule = tuple[Callable[[str], bool], Callable[[_RowContext], str]]

def _has(*needles: str) -> Callable[[str], bool]:
    return lambda h: any(n in h for n in needles)

# Checked top to bottom against the lower-cased header; first match wins.
ROW_RULES: list[Rule] = [
    (_is_identifier, lambda c: f"USR-{1000 + c.index}"),
    (lambda h: h == "name" or "full name" in h, lambda c: c.name),
    (_has("username"), lambda c: username_from(c.name)),
    (_has("email"), lambda c: f"{username_from(c.name)}{c.index + 1}@example.com"),
    (_has("role"), lambda c: c.pick(ROLES)),
    (_has("department"), lambda c: c.pick(DEPARTMENTS)),
    (lambda h: "status" in h and not ("http" in h or "code" in h),
     lambda c: "Active" if c.index % 2 == 0 else "Inactive"),
    (_has("phone"), _phone),
    (_has("location", "city"), lambda c: c.pick(CITIES)),
    (_has("manager"), lambda c: random_name(c.rng)),
    (_has("last login", "created", "updated"), lambda c: c.recent(90).strftime("%Y-%m-%d")),
    (_has("application"), lambda c: f"Application {c.index + 1}"),
    (_has("hostname"), lambda c: f"host{c.index + 1}.example.com"),
    (_has("method"), lambda c: c.pick(HTTP_METHODS)),
    (_has("start time"), lambda c: c.recent(7).strftime("%Y-%m-%d %H:%M:%S")),
    (_has("response time"), lambda c: c.integer(50, 1200)),
    (_has("load time"), lambda c: c.integer(200, 5000)),
    (_has("downtime"), lambda c: c.integer(0, 120)),
    (_has("sla"), lambda c: c.percent(95, 99.99)),
    (_has("error rate"), lambda c: c.percent(0, 5)),
    (_has("cpu", "memory", "disk"), lambda c: c.percent(5, 95)),
    (_has("endpoint"), lambda c: f"/api/v{1 + c.index % 3}/resource/{100 + c.index}"),
    (_has("env"), lambda c: c.pick(ENVS)),
    (_has("region"), lambda c: c.pick(REGIONS)),
]


def synthesize_cell(header: str, ctx: _RowContext, col: int) -> str:
    h = (header or "").lower()
    for matches, generate in ROW_RULES:
        if matches(h):
            return generate(ctx)
    return f"Value {ctx.index + 1}-{col + 1}"


def fallback_rows(
    headers: Sequence[str],
    rows: int,
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> list[list[str]]:
    """
    Synthesize ``rows`` rows of ``len(headers)`` cells.

    Args:
        headers: Final table headers; each cell is generated from its header.
        rows: Number of rows to produce.
        rng: Random source. A fresh unseeded generator is used when omitted.
        now: Reference time for date-like cells, current UTC time by default.
    """
    rng = rng or random.Random()
    now = now or datetime.now(timezone.utc)
    out = []
    for r in range(max(rows, 0)):
        ctx = _RowContext(r, rng, now)
        out.append([synthesize_cell(h, ctx, c) for c, h in enumerate(headers)])
    return out

# --- composition --------------------------------------------------------------

def normalize_table(
    text: str | None,
    prompt: str | None,
    rows: int,
    cols: int,
    rng: random.Random | None = None,
) -> NormalizedTable:
    """
    Normalize model output into a table of exactly ``cols`` headers and ``rows`` rows.

    Headers are replaced wholesale when the parsed count is wrong; rows are
    likewise regenerated from the final headers when the parsed row count is wrong.
    """
    headers, body = parse_table(text, rows, cols)
    if len(headers) != cols:
        headers = fallback_headers(prompt, cols)
    if len(body) != rows:
        body = fallback_rows(headers, rows, rng=rng)
    return NormalizedTable(headers=headers, rows=body)
