"""
Demo records for an empty database.

Gives the dashboard and API something to show without network access.
Seeding is per table and skips any table that already holds records, so
running it twice does not duplicate anything.
"""

import logging

from .database import Database
from .models import HistoricalDataRecord, KnowledgeArticle, LegalCase, RegulatoryUpdate

logger = logging.getLogger(__name__)

SAMPLE_LEGAL_CASES = [
    LegalCase(
        title="Medtronic, Inc. v. Lohr",
        court="Supreme Court of the United States",
        jurisdiction="US",
        case_number="518 U.S. 470",
        summary=(
            "State common-law claims against a pacemaker lead cleared through the 510(k) "
            "process are not preempted by the Medical Device Amendments."
        ),
        content=(
            "The Court held that the 510(k) substantial equivalence process focuses on "
            "equivalence rather than safety, and therefore does not impose device-specific "
            "federal requirements that preempt state negligence and product liability claims."
        ),
        decision_date="1996-06-26",
        verdict="Claims not preempted",
        outcome="Remanded",
        impact_level="high",
        document_url="https://supreme.justia.com/cases/federal/us/518/470/",
        keywords=["preemption", "510(k)", "product liability", "pacemaker"],
    ),
    LegalCase(
        title="Riegel v. Medtronic, Inc.",
        court="Supreme Court of the United States",
        jurisdiction="US",
        case_number="552 U.S. 312",
        summary=(
            "State-law claims challenging the safety or effectiveness of a device that "
            "received premarket approval (PMA) are preempted."
        ),
        content=(
            "Premarket approval imposes device-specific federal requirements. State tort "
            "claims that would impose different or additional requirements on a PMA "
            "balloon catheter are expressly preempted under 21 U.S.C. 360k(a)."
        ),
        decision_date="2008-02-20",
        verdict="Claims preempted",
        outcome="Affirmed",
        impact_level="high",
        document_url="https://supreme.justia.com/cases/federal/us/552/312/",
        keywords=["preemption", "PMA", "catheter", "liability"],
    ),
    LegalCase(
        title="Schmitt v TÜV Rheinland LGA Products GmbH",
        court="Court of Justice of the European Union",
        jurisdiction="EU",
        case_number="C-219/15",
        summary=(
            "A notified body is not generally required to carry out unannounced inspections "
            "but must act with diligence when there is evidence that a device may not comply."
        ),
        content=(
            "The reference arose from defective PIP breast implants. The Court ruled that a "
            "notified body may be liable to patients under national law when it fails to "
            "fulfil its obligations under Directive 93/42/EEC."
        ),
        decision_date="2017-02-16",
        verdict="Notified body duties clarified",
        outcome="Preliminary ruling",
        impact_level="medium",
        document_url="https://curia.europa.eu/juris/liste.jsf?num=C-219/15",
        keywords=["notified body", "breast implants", "liability", "MDD"],
    ),
]

SAMPLE_ARTICLES = [
    KnowledgeArticle(
        title="EU MDR Transition Timeline",
        summary="Key dates for moving legacy devices from the MDD to Regulation (EU) 2017/745.",
        content=(
            "Regulation (EU) 2023/607 extended the MDR transition period. Legacy devices with "
            "a valid certificate may remain on the market until 26 May 2026 for implantable "
            "class III devices, 31 December 2027 for other class III and class IIb implantable "
            "devices, and 31 December 2028 for the remaining class IIb, class IIa and class I "
            "devices requiring a notified body, provided the manufacturer has a quality "
            "management system in place and has applied for MDR certification."
        ),
        category="regulation",
        tags=["MDR", "EU", "transition"],
        authority="European Commission",
        language="en",
        author="Regulatory Affairs",
        is_published=True,
        published_at="2024-01-15T09:00:00",
    ),
    KnowledgeArticle(
        title="Choosing an FDA Premarket Pathway",
        summary="How 510(k), De Novo and PMA differ and when each applies.",
        content=(
            "Most class II devices reach the US market through a 510(k) premarket notification "
            "demonstrating substantial equivalence to a predicate device. Novel low and moderate "
            "risk devices without a predicate can request De Novo classification. Class III "
            "devices generally require premarket approval (PMA) supported by clinical evidence."
        ),
        category="guidance",
        tags=["FDA", "510(k)", "De Novo", "PMA"],
        authority="FDA",
        language="en",
        author="Regulatory Affairs",
        is_published=True,
        published_at="2024-02-01T09:00:00",
    ),
    KnowledgeArticle(
        title="Software as a Medical Device: Qualification Basics",
        summary="Draft notes on when standalone software qualifies as a medical device.",
        content=(
            "Software qualifies as a medical device when its intended purpose is diagnosis, "
            "prevention, monitoring, prediction, prognosis, treatment or alleviation of disease. "
            "Under MDR Rule 11 most such software is class IIa or higher. AI and machine "
            "learning functions need a documented approach to change control."
        ),
        category="guidance",
        tags=["SaMD", "software", "AI"],
        authority="MDCG",
        language="en",
        author="Regulatory Affairs",
        is_published=False,
    ),
]

SAMPLE_HISTORICAL = [
    HistoricalDataRecord(
        title="Deciding When to Submit a 510(k) for a Change to an Existing Device",
        document_id="FDA-GUID-2017-510K-CHANGES",
        description="Final guidance on device modifications that require a new 510(k).",
        source_id="fda_guidance",
        source_type="guidance",
        document_url="https://www.fda.gov/media/99812/download",
        region="US",
        category="guidance",
        priority="medium",
        device_classes=["Class II"],
        raw_text="This guidance describes how manufacturers decide whether a change to a legally marketed device requires a new 510(k).",
        published_at="2017-10-25T00:00:00",
    ),
    HistoricalDataRecord(
        title="MDCG 2019-11 Guidance on Qualification and Classification of Software",
        document_id="MDCG-2019-11",
        description="Qualification and classification of software under the MDR and IVDR.",
        source_id="mdcg",
        source_type="guidance",
        document_url="https://health.ec.europa.eu/system/files/2020-09/md_mdcg_2019_11_guidance_qualification_classification_software_en_0.pdf",
        region="EU",
        category="guidance",
        priority="high",
        device_classes=["Class IIa", "Class IIb", "Class III"],
        raw_text="This document provides guidance on the criteria for the qualification of software as a medical device and its classification.",
        published_at="2019-10-11T00:00:00",
    ),
    HistoricalDataRecord(
        title="Regulation (EU) 2017/745 on Medical Devices",
        document_id="EU-2017-745",
        description="The EU Medical Device Regulation as published in the Official Journal.",
        source_id="eur_lex",
        source_type="regulation",
        document_url="https://eur-lex.europa.eu/eli/reg/2017/745/oj",
        region="EU",
        category="regulation",
        priority="critical",
        device_classes=["Class I", "Class IIa", "Class IIb", "Class III"],
        raw_text="Regulation (EU) 2017/745 of the European Parliament and of the Council of 5 April 2017 on medical devices.",
        published_at="2017-05-05T00:00:00",
    ),
]

SAMPLE_UPDATES = [
    RegulatoryUpdate(
        title="FDA: Final Guidance on Cybersecurity in Medical Devices",
        description="Premarket submission content for cyber devices, including SBOM requirements.",
        content=(
            "The guidance describes the cybersecurity information manufacturers should include "
            "in premarket submissions, including a software bill of materials, threat modeling "
            "and a plan to monitor and address postmarket vulnerabilities."
        ),
        source_id="fda-medical-devices",
        source_url="https://www.fda.gov/regulatory-information/search-fda-guidance-documents/cybersecurity-medical-devices-quality-system-considerations-and-content-premarket-submissions",
        region="US",
        update_type="guidance",
        priority="high",
        device_classes=["Class II", "Class III"],
        categories=["Cybersecurity"],
        keywords=["cybersecurity", "SBOM", "premarket"],
        device_type="Software",
        published_at="2023-09-27T00:00:00",
    ),
    RegulatoryUpdate(
        title="EMA: Reflection Paper on AI in the Medicinal Product Lifecycle",
        description="Considerations for the use of artificial intelligence and machine learning.",
        content=(
            "The reflection paper sets out principles for the safe and effective use of "
            "artificial intelligence across the lifecycle, including data quality, model "
            "validation and transparency towards regulators."
        ),
        source_id="ema-main",
        source_url="https://www.ema.europa.eu/en/use-artificial-intelligence-ai-medicinal-product-lifecycle",
        region="EU",
        update_type="guidance",
        priority="medium",
        categories=["AI/ML"],
        keywords=["artificial intelligence", "machine learning"],
        device_type="AI/ML",
        published_at="2024-09-09T00:00:00",
    ),
    RegulatoryUpdate(
        title="BfArM: Field Safety Notice for Infusion Pumps",
        description="Manufacturer recall of infusion pumps due to a software error in dose calculation.",
        content=(
            "A software error may cause incorrect dose calculation under specific settings. "
            "Users should apply the corrective update and verify programmed infusions."
        ),
        source_id="bfarm-main",
        source_url="https://www.bfarm.de/EN/Medical-devices/Tasks/Risk-assessment-and-research/Field-corrective-actions/_node.html",
        region="DE",
        update_type="recall",
        priority="critical",
        device_classes=["Class IIb"],
        categories=["Safety"],
        keywords=["recall", "infusion pump", "software"],
        device_type="Infusion Pump",
        published_at="2024-03-12T00:00:00",
    ),
    RegulatoryUpdate(
        title="Swissmedic: Updated Requirements for Authorised Representatives",
        description="Clarification of duties for Swiss authorised representatives under the MedDO.",
        content=(
            "Foreign manufacturers must designate a Swiss authorised representative. The "
            "updated information sheet clarifies labelling and documentation obligations."
        ),
        source_id="swissmedic-main",
        source_url="https://www.swissmedic.ch/swissmedic/en/home/medical-devices.html",
        region="CH",
        update_type="regulation",
        priority="medium",
        keywords=["authorised representative", "MedDO"],
        published_at="2024-05-02T00:00:00",
    ),
]


def seed_sample_data(db: Database) -> dict[str, int]:
    """
    Insert the demo records into empty tables.

    Returns:
        Number of records inserted per table.
    """
    stats = db.get_statistics()
    counts = {"regulatory_updates": 0, "legal_cases": 0, "knowledge_articles": 0, "historical_records": 0}

    if stats["total_updates"] == 0:
        for update in SAMPLE_UPDATES:
            db.add_regulatory_update(update)
        counts["regulatory_updates"] = len(SAMPLE_UPDATES)

    if stats["total_legal_cases"] == 0:
        for legal_case in SAMPLE_LEGAL_CASES:
            db.add_legal_case(legal_case)
        counts["legal_cases"] = len(SAMPLE_LEGAL_CASES)

    if stats["total_articles"] == 0:
        for article in SAMPLE_ARTICLES:
            db.add_knowledge_article(article)
        counts["knowledge_articles"] = len(SAMPLE_ARTICLES)

    if stats["total_historical"] == 0:
        for record in SAMPLE_HISTORICAL:
            db.add_historical_record(record)
        counts["historical_records"] = len(SAMPLE_HISTORICAL)

    logger.info("Seeded sample data: %s", counts)
    return counts
