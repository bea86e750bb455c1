"""
openFDA device data collector.

Reads recent 510(k) clearances and device recalls from api.fda.gov and turns
them into ScrapedItems with their real decision and recall dates.
"""

import logging
import os
import time
from datetime import datetime
from typing import Any, Callable, Optional

import requests

from ..config import config
from ..enrichment.analysis import find_terms
from ..models import ScrapedItem
from .scraper import ScrapeResult

logger = logging.getLogger(__name__)

CLEARANCE_DB_URL = "https://www.accessdata.fda.gov/scripts/cdrh/cfdocs/cfpmn/pmn.cfm?ID={}"
RECALL_DB_URL = "https://www.accessdata.fda.gov/scripts/cdrh/cfdocs/cfRES/res.cfm?id={}"

# openFDA reports device classes as "1", "2", "3"
DEVICE_CLASS_LABELS = {"1": "Class I", "2": "Class II", "3": "Class III"}

HIGH_RISK_DEVICE_TERMS = ["implant", "implantable", "pacemaker", "defibrillator"]
AI_DEVICE_TERMS = ["ai", "artificial intelligence", "machine learning"]
SERIOUS_RECALL_TERMS = ["death", "serious injury"]

SPECIALTY_CATEGORIES = {
    "cardio": "Cardiology",
    "neuro": "Neurology",
    "ortho": "Orthopedics",
    "radio": "Radiology",
}
DEVICE_NAME_CATEGORIES = [
    (["software", "ai"], "Software as a Medical Device"),
    (["implant", "implantable"], "Implant"),
    (["monitor", "monitoring"], "Monitoring"),
    (["diagnostic"], "Diagnostics"),
]


def device_class_label(value: Optional[str]) -> Optional[str]:
    """Turn an openFDA device class ("2" or "Class II") into a display label."""
    if not value:
        return None
    value = value.strip()
    if value in DEVICE_CLASS_LABELS:
        return DEVICE_CLASS_LABELS[value]
    for label in DEVICE_CLASS_LABELS.values():
        if value.lower() == label.lower():
            return label
    return None


def parse_fda_date(value: Optional[str]) -> Optional[datetime]:
    """Parse openFDA dates, which come as YYYY-MM-DD or YYYYMMDD."""
    if not value:
        return None
    for fmt in ("%Y-%m-%d", "%Y%m%d"):
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def clearance_priority(device: dict) -> str:
    device_class = device_class_label((device.get("openfda") or {}).get("device_class"))
    name = device.get("device_name") or ""

    if device_class == "Class III" or find_terms(name, HIGH_RISK_DEVICE_TERMS):
        return "critical"
    if find_terms(name, AI_DEVICE_TERMS):
        return "high"
    if device_class == "Class II":
        return "medium"
    return "low"


def recall_priority(recall: dict) -> str:
    """Class I recalls and recalls citing death or serious injury are critical."""
    classification = (recall.get("classification") or "").strip().lower()
    reason = recall.get("reason_for_recall") or ""

    if classification == "class i" or find_terms(reason, SERIOUS_RECALL_TERMS):
        return "critical"
    if classification == "class ii":
        return "high"
    return "medium"


def clearance_categories(device: dict) -> list[str]:
    name = device.get("device_name") or ""
    specialty = ((device.get("openfda") or {}).get("medical_specialty_description") or "").lower()

    categories = [label for stem, label in SPECIALTY_CATEGORIES.items() if stem in specialty]
    for terms, label in DEVICE_NAME_CATEGORIES:
        if find_terms(name, terms):
            categories.append(label)
    return categories or ["Medical Device"]


def _format_fields(fields: list[tuple[str, Any]]) -> str:
    return "\n".join(f"{label}: {value or 'N/A'}" for label, value in fields)


class OpenFDACollector:
    """Fetch 510(k) clearances and device recalls from the openFDA API."""

    def __init__(
        self,
        limit_510k: Optional[int] = None,
        limit_recalls: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.base_url = config.get("openfda.base_url", "https://api.fda.gov").rstrip("/")
        self.limit_510k = limit_510k if limit_510k is not None else config.get("openfda.limit_510k", 3)
        self.limit_recalls = limit_recalls if limit_recalls is not None else config.get("openfda.limit_recalls", 2)
        self.delay_seconds = config.get("openfda.delay_seconds", 0.25)
        self.timeout = config.get("scraper.request_timeout", 30)
        self.api_key = os.environ.get(config.get("openfda.api_key_env", "FDA_API_KEY"), "")
        self.sleep = sleep
        self.session = requests.Session()
        self.session.headers.update(
            {
                "User-Agent": config.get("scraper.user_agent"),
                "Accept": "application/json",
            }
        )

    def _fetch_json(self, endpoint: str, params: dict) -> tuple[bool, Any]:
        """
        Fetch a JSON document from the API.

        Returns:
            Tuple of (success, results_or_error).
        """
        url = f"{self.base_url}{endpoint}"
        if self.api_key:
            params = {**params, "api_key": self.api_key}
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.Timeout:
            return False, f"Timeout fetching {url}"
        except requests.exceptions.HTTPError as e:
            return False, f"HTTP error {e.response.status_code} for {url}"
        except requests.exceptions.RequestException as e:
            return False, f"Request failed for {url}: {str(e)}"
        except ValueError:
            return False, f"Invalid JSON from {url}"

        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list):
            return False, f"Unexpected response format from {url}"
        return True, results

    def fetch_all(self) -> ScrapeResult:
        """
        Collect clearances and recalls.

        A failing endpoint is logged and recorded; the other is still read.
        """
        result = ScrapeResult(scrape_time=datetime.now())
        endpoints = [
            ("FDA 510(k) Clearances", self.fetch_clearances),
            ("FDA Device Recalls", self.fetch_recalls),
        ]

        for i, (name, fetch) in enumerate(endpoints):
            try:
                items = fetch()
                result.items.extend(items)
                result.sources_scraped += 1
                logger.info("  %s: %d records", name, len(items))
            except Exception as e:
                logger.error("openFDA %s failed: %s", name, e)
                result.errors.append(f"{name}: {e}")

            if i < len(endpoints) - 1 and self.delay_seconds:
                self.sleep(self.delay_seconds)

        return result

    def fetch_clearances(self) -> list[ScrapedItem]:
        """Most recently received 510(k) submissions."""
        success, results = self._fetch_json(
            "/device/510k.json", {"limit": self.limit_510k, "sort": "date_received:desc"}
        )
        if not success:
            raise RuntimeError(results)
        return [self.clearance_to_item(device) for device in results]

    def fetch_recalls(self) -> list[ScrapedItem]:
        """Most recently initiated device recalls."""
        success, results = self._fetch_json(
            "/device/recall.json", {"limit": self.limit_recalls, "sort": "event_date_initiated:desc"}
        )
        if not success:
            raise RuntimeError(results)
        return [self.recall_to_item(recall) for recall in results]

    def clearance_to_item(self, device: dict) -> ScrapedItem:
        openfda = device.get("openfda") or {}
        k_number = device.get("k_number")
        name = device.get("device_name") or "Unknown Device"
        device_class = device_class_label(openfda.get("device_class"))
        decided = parse_fda_date(device.get("decision_date"))
        now = datetime.now().isoformat()

        content = _format_fields(
            [
                ("K Number", k_number),
                ("Applicant", device.get("applicant")),
                ("Product Code", device.get("product_code")),
                ("Device Class", device_class),
                ("Regulation Number", device.get("regulation_number") or openfda.get("regulation_number")),
                ("Decision Date", device.get("decision_date")),
                ("Decision", device.get("decision_description") or device.get("decision")),
            ]
        )
        if device.get("statement_or_summary"):
            content += f"\nSummary: {device['statement_or_summary']}"
        if openfda.get("medical_specialty_description"):
            content += f"\nMedical Specialty: {openfda['medical_specialty_description']}"

        return ScrapedItem(
            source_name="FDA 510(k) Clearances",
            source_id="fda_510k",
            title=f"FDA 510(k): {name}{f' ({k_number})' if k_number else ''}",
            url=CLEARANCE_DB_URL.format(k_number) if k_number else f"{self.base_url}/device/510k.json",
            content=content,
            category="approval",
            region="US",
            publication_date=decided.isoformat() if decided else now,
            scrape_timestamp=now,
            regulation_type="FDA_510k",
            device_class=device_class,
            keywords=["FDA", "510(k)", "clearance"],
            priority=clearance_priority(device),
            categories=clearance_categories(device),
        )

    def recall_to_item(self, recall: dict) -> ScrapedItem:
        openfda = recall.get("openfda") or {}
        recall_id = recall.get("cfres_id")
        number = recall.get("recall_number") or recall.get("product_res_number")
        initiated = parse_fda_date(recall.get("event_date_initiated") or recall.get("recall_initiation_date"))
        now = datetime.now().isoformat()

        content = _format_fields(
            [
                ("Recall Number", number),
                ("Reason", recall.get("reason_for_recall")),
                ("Status", recall.get("recall_status") or recall.get("status")),
                ("Classification", recall.get("classification")),
                ("Recalling Firm", recall.get("recalling_firm")),
                ("Product Quantity", recall.get("product_quantity")),
                ("Distribution Pattern", recall.get("distribution_pattern")),
            ]
        )
        if recall.get("code_info"):
            content += f"\nCode Info: {recall['code_info']}"

        description = recall.get("product_description") or "Medical Device Recall"
        if len(description) > 150:
            description = description[:150].rsplit(" ", 1)[0] + "..."

        return ScrapedItem(
            source_name="FDA Device Recalls",
            source_id="fda_recalls",
            title=f"FDA Recall: {description}",
            url=RECALL_DB_URL.format(recall_id) if recall_id else f"{self.base_url}/device/recall.json",
            content=content,
            category="recall",
            region="US",
            publication_date=initiated.isoformat() if initiated else now,
            scrape_timestamp=now,
            regulation_type="FDA_Recall",
            device_class=device_class_label(openfda.get("device_class")),
            keywords=["FDA", "recall"],
            priority=recall_priority(recall),
            categories=["Safety Alert", "Device Recall"],
        )
