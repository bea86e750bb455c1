"""
Static configuration of the regulatory web sources and their scrape profiles.
"""

from dataclasses import asdict, dataclass, field
from typing import Optional

SOURCE_CATEGORIES = (
    "regulatory_database",
    "market_analysis",
    "compliance",
    "standards",
    "regulatory_update",
    "approval",
)


@dataclass
class RegulatorySource:
    """A statically configured regulatory web source.

    The scrape profile (``selectors`` onwards) describes how content is
    extracted from the page. Sources with status ``configured`` are listed
    but never scraped.
    """

    id: str
    name: str
    url: str
    description: str
    category: str
    region: str
    status: str = "active"
    requires_auth: bool = False
    selectors: list[str] = field(default_factory=list)
    max_items: int = 10
    min_length: int = 100
    required_terms: list[str] = field(default_factory=list)
    title_template: str = "{name} - Item {index}"
    regulation_type: Optional[str] = None
    item_category: Optional[str] = None
    link_mode: bool = False
    accept_language: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def to_dict(self) -> dict:
        return asdict(self)


DEFAULT_SOURCES: list[RegulatorySource] = [
    RegulatorySource(
        id="fda_medical_device_db",
        name="FDA Medical Device Databases",
        url="https://www.fda.gov/medical-devices/device-advice-comprehensive-regulatory-assistance/medical-device-databases",
        description="Comprehensive FDA databases for medical devices",
        category="regulatory_database",
        region="US",
        selectors=[
            "table.table-striped a",
            ".database-list a",
            '.content-area a[href*="database"]',
            "ul li a",
        ],
        max_items=15,
        min_length=10,
        title_template="FDA Database: {text}",
        regulation_type="FDA_Database",
        link_mode=True,
    ),
    RegulatorySource(
        id="who_global_atlas",
        name="WHO Global Atlas of Medical Devices",
        url="https://www.who.int/teams/health-product-policy-and-standards/assistive-and-medical-technology/medical-devices/global-atlas-of-medical-devices",
        description="Global WHO data on the availability of health technology policies",
        category="standards",
        region="Global",
        selectors=[
            ".sf-content-block p",
            ".page-content p",
            ".main-content p",
            "article p",
        ],
        max_items=10,
        min_length=100,
        title_template="WHO Medical Device Policy - Section {index}",
        regulation_type="WHO_Policy",
    ),
    RegulatorySource(
        id="medtech_europe_convergence",
        name="MedTech Europe Regulatory Convergence",
        url="https://www.medtecheurope.org/international/international-regulatory-convergence/",
        description="Regulatory convergence and MDR/IVDR impact",
        category="compliance",
        region="EU",
        selectors=[
            ".field-name-body p",
            ".content-area p",
            ".page-content p",
            "main p",
        ],
        max_items=8,
        min_length=80,
        title_template="EU Regulatory Convergence - Topic {index}",
        regulation_type="EU_MDR_IVDR",
    ),
    RegulatorySource(
        id="ncbi_global_framework",
        name="NCBI Global Regulation Framework",
        url="https://www.ncbi.nlm.nih.gov/books/NBK209785/",
        description="Global framework for the regulation of medical devices",
        category="standards",
        region="Global",
        selectors=[
            ".chapter p",
            ".sec p",
            ".content p",
            "#maincontent p",
        ],
        max_items=12,
        min_length=120,
        title_template="Global Medical Device Regulation Framework - Chapter {index}",
        regulation_type="Global_Framework",
    ),
    RegulatorySource(
        id="iqvia_compliance_blog",
        name="IQVIA MedTech Compliance Blog",
        url="https://www.iqvia.com/blogs/2025/05/the-future-of-medtech-compliance",
        description="Future of MedTech Compliance - Regulatory Intelligence Insights",
        category="market_analysis",
        region="Global",
        selectors=[
            ".blog-content p",
            ".article-body p",
            ".post-content p",
            ".content-area p",
        ],
        max_items=6,
        min_length=100,
        title_template="Future of MedTech Compliance - Insight {index}",
        regulation_type="Market_Analysis",
    ),
    RegulatorySource(
        id="bfarm_web_scraping",
        name="BfArM Medical Devices",
        url="https://www.bfarm.de/DE/Medizinprodukte/_node.html",
        description="German Federal Institute for Drugs and Medical Devices",
        category="regulatory_update",
        region="DE",
        selectors=[
            ".contentWrapper .text-content p",
            ".main-content .page-content p",
            ".content-area p",
            ".article-body p",
            "main p",
        ],
        max_items=10,
        min_length=100,
        required_terms=["Medizinprodukt"],
        title_template="BfArM Medical Device Regulation - Update {index}",
        regulation_type="BfArM_MPG",
        accept_language="de-DE,de;q=0.9,en;q=0.8",
    ),
    RegulatorySource(
        id="swissmedic_web_scraping",
        name="Swissmedic Medical Devices",
        url="https://www.swissmedic.ch/swissmedic/de/home/medizinprodukte.html",
        description="Swiss Agency for Therapeutic Products, medical devices",
        category="approval",
        region="CH",
        selectors=[
            ".main-content .text p",
            ".content-wrapper p",
            ".page-content p",
            ".article-content p",
            "main .content p",
        ],
        max_items=8,
        min_length=120,
        title_template="Swissmedic Medical Device Approval - Update {index}",
        regulation_type="Swissmedic_MDD",
        accept_language="de-CH,de;q=0.9,en;q=0.8",
    ),
    RegulatorySource(
        id="health_canada_web_scraping",
        name="Health Canada Medical Devices",
        url="https://www.canada.ca/en/health-canada/services/drugs-health-products/medical-devices.html",
        description="Health Canada medical device regulation",
        category="regulatory_update",
        region="CA",
        selectors=[
            ".main-content .field-item p",
            ".page-content p",
            ".content-wrapper p",
            ".article-body p",
            "main .content p",
        ],
        max_items=10,
        min_length=100,
        # "medical device" implies "device"
        required_terms=["device"],
        title_template="Health Canada Medical Device Regulation - Update {index}",
        regulation_type="Health_Canada_MDR",
        accept_language="en-CA,en;q=0.9,fr-CA;q=0.8",
    ),
    # Premium sources, configured but requiring credentials
    RegulatorySource(
        id="medboard_regulatory",
        name="MedBoard Regulatory Intelligence",
        url="https://www.medboard.com/regulatory/",
        description="Regulatory intelligence and research in more than 225 countries",
        category="regulatory_database",
        region="Global",
        status="configured",
        requires_auth=True,
    ),
    RegulatorySource(
        id="clarivate_medtech",
        name="Clarivate Medtech Regulatory Intelligence",
        url="https://clarivate.com/life-sciences-healthcare/medtech/medtech-regulatory-intelligence/",
        description="Medtech regulatory data from 75 countries, 79,000+ source documents",
        category="regulatory_database",
        region="Global",
        status="configured",
        requires_auth=True,
    ),
    RegulatorySource(
        id="iqvia_regulatory_intelligence",
        name="IQVIA Regulatory Intelligence Platform",
        url="https://www.iqvia.com/solutions/safety-regulatory-compliance/regulatory-compliance/iqvia-regulatory-intelligence",
        description="Regulatory intelligence with real-time updates from national authorities in 110+ countries",
        category="regulatory_database",
        region="Global",
        status="configured",
        requires_auth=True,
    ),
]


def get_source(source_id: str) -> Optional[RegulatorySource]:
    """Look up a default source by ID."""
    for source in DEFAULT_SOURCES:
        if source.id == source_id:
            return source
    return None
