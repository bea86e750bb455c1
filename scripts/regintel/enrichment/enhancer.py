"""
Content enhancer that appends templated analysis sections to regulatory updates.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from .analysis import contains_term

logger = logging.getLogger(__name__)

ENHANCEMENT_MARKER = "Content Enhancement Status"

MARKET_SIZES = {
    "cardiovascular": "45-60 billion",
    "oncology": "35-50 billion",
    "neurology": "25-35 billion",
    "orthopedics": "20-30 billion",
    "diabetes": "15-25 billion",
    "diagnostics": "30-40 billion",
    "surgical": "25-35 billion",
}
DEFAULT_MARKET_SIZE = "10-20 billion"


def get_fda_pathway(device_type: Optional[str]) -> str:
    """Pick the FDA premarket pathway suggested by the device type."""
    device = (device_type or "").lower()
    if "software" in device or contains_term(device, "ai"):
        return "De Novo pathway for Software as a Medical Device (SaMD)"
    if "implant" in device or "cardiac" in device:
        return "PMA (Premarket Approval) for Class III high-risk devices"
    return "510(k) Premarket Notification with predicate device comparison"


def get_market_size(therapeutic_area: Optional[str]) -> str:
    area = (therapeutic_area or "").lower()
    for key, value in MARKET_SIZES.items():
        if key in area:
            return value
    return DEFAULT_MARKET_SIZE


def is_enhanced(content: Optional[str]) -> bool:
    return bool(content) and ENHANCEMENT_MARKER in content


class ContentEnhancer:
    """Expands regulatory update content with nine numbered analysis sections."""

    def build_sections(self, device_type: str, therapeutic_area: str) -> list[tuple[str, list[str]]]:
        return [
            ("Technical Specifications", [
                "Device classification: Class II/III medical device per FDA 21 CFR 860 / EU MDR Annex VIII",
                "Biocompatibility: full biological evaluation per ISO 10993-1 to 10993-20",
                "Sterilization: ethylene oxide, gamma or e-beam per ISO 11135/11137/11607",
                "Software classification: IEC 62304 Class A/B/C with software lifecycle processes",
                "Electrical safety: IEC 60601-1 medical electrical equipment",
                "EMC conformity: IEC 60601-1-2 electromagnetic compatibility",
                "Usability engineering: IEC 62366-1 usability engineering process",
                "Risk management: ISO 14971 with post-market surveillance",
                "Quality management: ISO 13485 quality management systems",
                "Labeling: FDA 21 CFR 801 / EU MDR Article 20 labeling and instructions",
            ]),
            ("Regulatory Approval Pathways", [
                f"FDA pathway: {get_fda_pathway(device_type)} with Pre-Submission Q-Sub meetings",
                "EU MDR pathway: conformity assessment per Annex VII-XI with a notified body",
                "Health Canada: Medical Device Licence (MDL) per Class II/III/IV requirements",
                "Japan PMDA: manufacturing and marketing approval",
                "Australia TGA: conformity assessment certificate with an Australian sponsor",
                "Brazil ANVISA: registration under the medical device regulation",
                "China NMPA: medical device registration certificate",
                "India CDSCO: registration under the Medical Device Rules 2017",
                "South Korea MFDS: medical device licence",
                "Global harmonization: IMDRF format for multi-country submissions",
            ]),
            ("Clinical Evidence and Study Design", [
                "Pivotal trial: randomized controlled trial with 200-2000 subjects",
                "Primary endpoints: efficacy measures with statistically significant differences",
                "Secondary endpoints: safety profile, quality of life, economic outcomes",
                "Inclusion criteria: specific patient population with defined conditions",
                "Exclusion criteria: contraindications, concomitant medications, comorbidities",
                "Statistical power: 80-90% with alpha 0.05",
                "Interim analysis: Data Safety Monitoring Board reviews",
                "Long-term follow-up: 1-5 years post-market clinical follow-up (PMCF)",
                "Real-world evidence: registry studies with 1000+ patients over 2-5 years",
                "Comparative effectiveness: head-to-head studies against standard of care",
            ]),
            ("Market Analysis", [
                f"Global market size: ${get_market_size(therapeutic_area)} with 8-12% CAGR to 2030",
                "Competitive landscape: 5-10 established competitors",
                "Market penetration: 5-15% market share within 3-5 years",
                "Pricing strategy: premium, value or budget positioning",
                "Distribution channels: direct sales, distribution partners, e-commerce",
                "Key opinion leaders: 50-200 KOLs for clinical evidence and adoption",
                "Health economics: cost-effectiveness analysis with QALY/ICER",
                "Reimbursement: CMS coverage, private payer negotiations, DRG classification",
                "Market access: HTA submissions to NICE, G-BA and HAS",
                "Commercial launch: tiered market launch over 2-3 years",
            ]),
            ("Competitive Analysis", [
                "Technology differentiation against 5-10 direct competitor products",
                "Patent landscape: 50-200 relevant patents with freedom-to-operate analysis",
                "Clinical superiority: head-to-head studies",
                "Cost analysis: total cost of ownership against alternative treatments",
                "User experience: workflow integration and training requirements",
                "Manufacturing advantages: economies of scale, supply chain optimization",
                "Regulatory benefits: breakthrough device designation",
                "Strategic partnerships: academic medical centers and research institutions",
                "Digital integration: connectivity, EMR integration, telemedicine",
                "Innovation pipeline: next-generation products on a 2-5 year timeline",
            ]),
            ("Risk Assessment and Mitigation", [
                "Technical risks: device malfunction, software defects, hardware failures",
                "Clinical risks: adverse events, efficacy shortfall, patient non-compliance",
                "Regulatory risks: approval delays of 6-24 months, additional clinical requirements",
                "Commercial risks: market adoption, competitive response, pricing pressure",
                "Manufacturing risks: supply chain disruption, quality issues, scaling",
                "Financial risks: development costs, revenue shortfall, delayed ROI",
                "Cybersecurity: FDA cybersecurity guidance, HIPAA, data protection",
                "Product liability: insurance coverage and legal risk mitigation",
                "Intellectual property: patent litigation risk, trade secret protection",
                "Reimbursement risks: coverage denials, payment reductions, policy changes",
            ]),
            ("Implementation Timeline", [
                "Phase 0 (months -6 to 0): regulatory strategy, team assembly, budget approval",
                "Phase I (months 1-6): preclinical testing, design validation, manufacturing setup",
                "Phase II (months 7-12): clinical study initiation, first patient enrolled",
                "Phase III (months 13-18): clinical data collection, interim analysis",
                "Phase IV (months 19-24): study completion, statistical analysis, submission",
                "Phase V (months 25-30): regulatory review, facility inspections, approval",
                "Phase VI (months 31-36): commercial manufacturing, launch, post-market surveillance",
                "Milestone gates: go/no-go decisions with investment committee reviews",
                "Risk mitigation: parallel development tracks and contingency planning",
                "Resource allocation over a 3-5 year development timeline",
            ]),
            ("Financial Analysis", [
                "R&D investment: $20-200M over 3-5 years to market approval",
                "Clinical trial costs: $5-50M for pivotal studies",
                "Regulatory expenses: $2-10M for FDA, EU and global submissions",
                "Manufacturing capex: $10-100M for facilities and equipment",
                "Commercial investment: $20-100M for launch, sales force and marketing",
                "Peak sales projection: $100M-$2B based on market size and penetration",
                "Break-even: 3-7 years after launch depending on adoption",
                "Net present value: $200M-$5B at a 10-15% discount rate over 15 years",
                "Internal rate of return: 15-35% depending on commercial success",
                "Sensitivity analysis: base, optimistic and pessimistic scenarios",
            ]),
            ("Regulatory Intelligence and Compliance Monitoring", [
                "FDA guidance updates: quarterly review of draft and final guidance",
                "EU MDR implementation: MDCG guidance and notified body decisions",
                "Global changes: Health Canada, PMDA, TGA and ANVISA updates",
                "Industry standards: ISO/IEC updates with impact assessment",
                "Post-market requirements: periodic safety updates, PMCF reports, vigilance",
                "Quality system maintenance: ISO 13485 surveillance audits, CAPA",
                "Competitor approvals, market authorizations and recalls",
                "Compliance monitoring: FDA warning letters, EU safety communications",
                "Stakeholder engagement: FDA/EMA pre-submission meetings",
                "Future trends: AI/ML regulation, digital health, personalized medicine",
            ]),
        ]

    def expand_content(
        self,
        content: Optional[str],
        device_type: Optional[str] = None,
        therapeutic_area: Optional[str] = None,
        jurisdiction: Optional[str] = None,
    ) -> str:
        """
        Append the analysis sections and the enhancement footer to ``content``.

        Args:
            content: Original content.
            device_type: Used to pick the FDA pathway.
            therapeutic_area: Used to look up the market size.
            jurisdiction: Recorded in the footer.
        """
        sections = self.build_sections(device_type or "Medical Device", therapeutic_area or "Healthcare")

        lines = [content or "Regulatory Update Content", ""]
        for number, (title, items) in enumerate(sections, start=1):
            lines.append(f"## {number}. {title}")
            lines.extend(f"{i}. {item}" for i, item in enumerate(items, start=1))
            lines.append("")

        data_points = sum(len(items) for _, items in sections)
        lines.extend([
            "---",
            "",
            f"**{ENHANCEMENT_MARKER}**: enhanced",
            f"**Analysis areas**: {len(sections)}",
            f"**Data points**: {data_points}",
            f"**Jurisdiction**: {jurisdiction or 'Global'}",
            f"**Enhanced**: {datetime.now().isoformat()}",
        ])
        return "\n".join(lines)

    def enhancement_metadata(
        self, device_type: Optional[str] = None, therapeutic_area: Optional[str] = None
    ) -> dict[str, Any]:
        """Metadata recorded on an enhanced update; counts match the appended sections."""
        sections = self.build_sections(device_type or "Medical Device", therapeutic_area or "Healthcare")
        return {
            "enhanced": True,
            "enhancement_date": datetime.now().isoformat(),
            "analysis_areas": len(sections),
            "total_data_points": sum(len(items) for _, items in sections),
        }

    def enhance_update(self, db, update_id: int) -> bool:
        """
        Enhance a stored update in place.

        Returns:
            True if the update was enhanced, False if it does not exist or is
            already enhanced.
        """
        update = db.get_regulatory_update(update_id)
        if update is None or is_enhanced(update.content):
            return False

        content = self.expand_content(
            update.content or update.description,
            update.device_type,
            update.therapeutic_area,
            update.region,
        )
        metadata = {**update.metadata, **self.enhancement_metadata(update.device_type, update.therapeutic_area)}
        return db.update_regulatory_update(update_id, content=content, metadata=metadata)


def mass_enhance_all(db, enhancer: Optional[ContentEnhancer] = None) -> dict[str, int]:
    """
    Enhance every stored regulatory update that is not yet enhanced.

    Returns:
        Counts of enhanced, skipped and failed updates.
    """
    enhancer = enhancer or ContentEnhancer()
    updates = db.get_all_regulatory_updates()
    logger.info("Starting content enhancement for %d regulatory updates", len(updates))

    counts = {"enhanced": 0, "skipped": 0, "errors": 0}
    for update in updates:
        if is_enhanced(update.content):
            counts["skipped"] += 1
            continue
        try:
            if enhancer.enhance_update(db, update.id):
                counts["enhanced"] += 1
            else:
                counts["skipped"] += 1
        except Exception as e:
            logger.error("Error enhancing update %s: %s", update.id, e)
            counts["errors"] += 1

    logger.info(
        "Enhancement completed: %d enhanced, %d skipped, %d errors",
        counts["enhanced"], counts["skipped"], counts["errors"],
    )
    return counts
