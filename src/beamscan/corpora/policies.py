"""Mock policy records carried by non-rejected particles.

Each target label maps to a template of amounts, durations, eligible groups
and details; a record mixes random picks from its template with two fixed
generic conditions.
"""

from __future__ import annotations

import random
from typing import Any

from beamscan.model.particle import PolicyRecord

POLICY_LABELS = [
    "Youth Housing",
    "Job Seeking",
    "Startup Funding",
    "Education",
    "Counseling",
    "Rent Support",
    "Transit",
    "Culture & Arts",
    "Asset Building",
    "Skills Training",
]

POLICY_TEMPLATES: dict[str, dict[str, list[str]]] = {
    "Youth Housing": {
        "amounts": [
            "Deposit loan up to 100M KRW",
            "Rent subsidy 2.4M KRW / year",
            "Moving allowance 400K KRW",
            "Lease interest 3M KRW / year",
            "80% of public rental deposit",
        ],
        "durations": ["Up to 4 years", "12 monthly payments", "Paid at once", "2 years (renewable)", "Lease term"],
        "targets": [
            "Homeless youth householders",
            "Single households aged 19-39",
            "Below 60% of median income",
            "University students outside the capital",
            "Newlyweds and engaged couples",
        ],
        "details": [
            "Lease deposit of 300M KRW or less",
            "Move-in registration required",
            "Must live apart from parents",
            "Paid immediately once income criteria are met",
        ],
    },
    "Job Seeking": {
        "amounts": [
            "Job seeker allowance 500K KRW / month",
            "Employment bonus 3M KRW",
            "Certification fees up to 1M KRW",
            "Intern salary 2.5M KRW / month",
            "Interview preparation 300K KRW",
        ],
        "durations": ["Paid for 6 months", "After 1 year employed", "Within annual limit", "Up to 6 months", "On application"],
        "targets": [
            "Unemployed youth",
            "Expected graduates",
            "Final-semester students",
            "SME employees",
            "Registered job seekers",
        ],
        "details": [
            "Job seeker registration required",
            "Proof of local residence",
            "Interview attendance confirmation",
            "Extra incentive after 3 months employed",
        ],
    },
    "Startup Funding": {
        "amounts": [
            "Commercialization grant 50M KRW",
            "Office deposit 20M KRW",
            "Seed funding 10M KRW",
            "Marketing budget 5M KRW",
            "Low-interest loan 100M KRW",
        ],
        "durations": ["1-year agreement", "Up to 2 years", "Paid at once", "Decided after review", "5-year repayment"],
        "targets": [
            "Prospective founders",
            "Companies under 3 years old",
            "CEOs aged 39 or younger",
            "Tech startups",
            "Regional specialty industries",
        ],
        "details": [
            "Business plan review required",
            "20 hours of founder training",
            "Additional support once revenue starts",
            "Dedicated office space",
        ],
    },
    "Education": {
        "amounts": [
            "Learning voucher 2M KRW",
            "Book allowance 300K KRW",
            "IT equipment 1.5M KRW",
            "Full tuition (up to 5M KRW)",
            "Language test fees, 3 per year",
        ],
        "durations": ["Valid for 1 year", "Once a year", "Paid at once", "On course completion", "On application"],
        "targets": [
            "University students",
            "Low-income youth",
            "Youth not in college",
            "Vocational trainees",
            "Student loan holders",
        ],
        "details": [
            "80% attendance required",
            "Refunded on certificate submission",
            "Income bracket review",
            "Designated institutions only",
        ],
    },
    "default": {
        "amounts": [
            "Living stabilization 1M KRW",
            "Welfare points 500K",
            "Emergency living costs 2M KRW",
            "Transit allowance 300K KRW / year",
            "Activity allowance 300K KRW / month",
        ],
        "durations": ["Paid at once", "Twice a year", "Lump sum", "Once a year", "Paid for 3 months"],
        "targets": [
            "Local youth residents",
            "Aged 19-34",
            "No income requirement",
            "First come, first served",
            "Householders",
        ],
        "details": [
            "Copy of ID card",
            "Resident registration",
            "Copy of bank book",
            "Application form required",
        ],
    },
}

# Labels that borrow another template
TEMPLATE_ALIASES: dict[str, str] = {
    "Rent": "Youth Housing",
    "Asset": "default",
    "Transit": "default",
}

GENERIC_DETAILS = [
    "Korean citizens only",
    "Cannot be combined with other programs (check first)",
]


def resolve_template(category: str) -> dict[str, list[str]]:
    """Find the template whose key appears in the category label."""
    key = next((k for k in POLICY_TEMPLATES if k != "default" and k in category), "default")
    for fragment, alias in TEMPLATE_ALIASES.items():
        if fragment in category:
            key = alias
    return POLICY_TEMPLATES.get(key, POLICY_TEMPLATES["default"])


def generate_policy(category: str, rng: random.Random | None = None) -> PolicyRecord:
    """Generate a mock policy record for a target label.

    Args:
        category: Label of the target that was fired on.
        rng: Random source; a fresh one is used when omitted.

    Returns:
        PolicyRecord with a 70-99% match probability.
    """
    rng = rng or random.Random()
    template = resolve_template(category)
    details = [
        rng.choice(template["details"]),
        GENERIC_DETAILS[0],
        rng.choice(template["details"]),
        GENERIC_DETAILS[1],
    ]
    return PolicyRecord(
        name=f"{category} Special Support",
        category=category,
        target_short=rng.choice(template["targets"]),
        probability=rng.randint(70, 99),
        amount=rng.choice(template["amounts"]),
        duration=rng.choice(template["durations"]),
        details=details,
    )


def policy_to_dict(record: PolicyRecord) -> dict[str, Any]:
    """Convert a record to a JSON-serializable dict."""
    return {
        "name": record.name,
        "category": record.category,
        "target_short": record.target_short,
        "probability": record.probability,
        "amount": record.amount,
        "duration": record.duration,
        "details": list(record.details),
    }
