CATALOG_VERSION = "2025.01"


def weeks(n):
    return n * 7


def months(n):
    return round(n * 30.44)


def years(n):
    return round(n * 365.25)


# Eligibility windows in months, inclusive: tag -> (min, max)
AGE_GROUPS = {
    "birth": (0, 1),
    "newborn": (0, 0.25),
    "0-1m": (0, 1),
    "6-8w": (1.5, 2),
    "6w-6m": (1.5, 6),
    "9m": (8, 12),
    # Catch-up windows between routine visits
    "6-12m": (6, 12),
    "12-16m": (12, 16),
    "2-5y": (2 * 12, 5 * 12),
    "16-24m": (16, 24),
    "5-6y": (5 * 12, 6 * 12),
    "9-14y": (9 * 12, 14 * 12),
    "10-16y": (10 * 12, 16 * 12),
    "adult": (18 * 12, 60 * 12),
    "60+": (60 * 12, 120 * 12),
}

TRUSTED_SOURCES = [
    "mohfw.gov.in",
    "nhm.gov.in",
    "india.gov.in",
    "who.int",
    "icmr.gov.in",
]

_UIP = {"title": "MoHFW - Universal Immunization Programme", "url": "https://main.mohfw.gov.in", "retrieved_date": "2025-01-15"}
_NHM = {"title": "NHM - Immunization", "url": "https://nhm.gov.in/index1.php?lang=1&level=2&sublinkid=824&lid=220", "retrieved_date": "2025-01-15"}
_WHO = {"title": "WHO - Immunization tables", "url": "https://www.who.int/teams/immunization-vaccines-and-biologicals/policies/who-recommendations-for-routine-immunization---summary-tables", "retrieved_date": "2025-01-15"}
_ICMR = {"title": "ICMR Guidelines", "url": "https://www.icmr.gov.in", "retrieved_date": "2025-01-15"}
_IAP = {"title": "IAP Immunization Schedule", "url": "https://iapindia.org/immunisation-schedule", "retrieved_date": "2025-01-15"}

VACCINES = [
    {
        "id": "bcg",
        "name": "BCG (Bacillus Calmette-Guérin)",
        "synonyms": ["BCG vaccine", "BCG"],
        "vaccine_type": "live-attenuated",
        "target_age_groups": ["birth"],
        "schedule": [
            {"dose_number": 1, "timing": {"kind": "from_birth", "days": 0, "label": "At birth (preferably within 24 hours)"},
             "notes": "Single dose in most schedules."},
        ],
        "diseases_prevented": ["Tuberculosis (severe forms)"],
        "indications": ["Prevents severe forms of tuberculosis in infants and young children"],
        "benefits": "Reduces risk of severe TB in children, especially miliary TB and TB meningitis.",
        "common_side_effects": ["Local ulceration", "Scar formation"],
        "contraindications": ["Severe immunodeficiency", "Symptomatic HIV infection"],
        "mandatory_status": "mandatory",
        "cost_estimate": {"public": "free", "private": "₹50-₹200"},
        "evidence_level": "high",
        "confidence": 0.95,
        "sources": [_UIP],
    },
    {
        "id": "hepb",
        "name": "Hepatitis B",
        "synonyms": ["Hep B", "HepB", "Hepatitis B vaccine"],
        "vaccine_type": "inactivated",
        "target_age_groups": ["birth", "6-8w", "6w-6m", "6-12m"],
        "schedule": [
            {"dose_number": 1, "timing": {"kind": "from_birth", "days": 0, "label": "At birth (within 24 hours)"},
             "notes": "Birth dose"},
            {"dose_number": 2, "timing": {"kind": "from_birth", "days": weeks(6), "label": "6 weeks"},
             "interval_from_previous": "6 weeks after first dose"},
            {"dose_number": 3, "timing": {"kind": "from_birth", "days": months(6), "label": "6 months"},
             "interval_from_previous": "About 4 months after second dose"},
        ],
        "diseases_prevented": ["Hepatitis B", "Liver cirrhosis", "Liver cancer"],
        "indications": ["Prevents hepatitis B infection", "Protects against liver disease"],
        "benefits": "Prevents hepatitis B infection which can cause chronic liver disease and liver cancer.",
        "common_side_effects": ["Soreness at injection site", "Mild fever", "Fatigue"],
        "contraindications": ["Severe allergic reaction to previous dose", "Yeast allergy"],
        "mandatory_status": "mandatory",
        "cost_estimate": {"public": "free", "private": "₹200-₹500"},
        "evidence_level": "high",
        "confidence": 0.98,
        "sources": [_UIP, _WHO],
    },
    {
        "id": "opv",
        "name": "Oral Polio Vaccine (OPV)",
        "synonyms": ["OPV", "bOPV", "Polio drops"],
        "vaccine_type": "live-attenuated",
        "target_age_groups": ["birth", "6-8w", "6w-6m", "6-12m", "12-16m", "16-24m", "2-5y"],
        "schedule": [
            {"dose_number": 1, "timing": {"kind": "from_birth", "days": 0, "label": "At birth (OPV-0)"}},
            {"dose_number": 2, "timing": {"kind": "from_birth", "days": weeks(6), "label": "6 weeks"}},
            {"dose_number": 3, "timing": {"kind": "from_previous_dose", "days": weeks(4), "label": "10 weeks"},
             "interval_from_previous": "4 weeks"},
            {"dose_number": 4, "timing": {"kind": "from_previous_dose", "days": weeks(4), "label": "14 weeks"},
             "interval_from_previous": "4 weeks"},
            {"dose_number": 5, "timing": {"kind": "age_group", "group": "16-24m", "label": "16-24 months"},
             "notes": "Booster dose"},
        ],
        "diseases_prevented": ["Poliomyelitis"],
        "indications": ["Prevents polio infection and transmission"],
        "benefits": "Builds gut immunity against poliovirus and interrupts community transmission.",
        "common_side_effects": ["Rarely mild diarrhoea"],
        "contraindications": ["Severe immunodeficiency"],
        "mandatory_status": "mandatory",
        "cost_estimate": {"public": "free", "private": "free"},
        "evidence_level": "high",
        "confidence": 0.97,
        "sources": [_UIP, _NHM],
    },
    {
        "id": "ipv",
        "name": "Inactivated Polio Vaccine (fIPV)",
        "synonyms": ["IPV", "fIPV", "Injectable polio vaccine"],
        "vaccine_type": "inactivated",
        "target_age_groups": ["6-8w", "6w-6m", "6-12m", "9m"],
        "schedule": [
            {"dose_number": 1, "timing": {"kind": "from_birth", "days": weeks(6), "label": "6 weeks"}},
            {"dose_number": 2, "timing": {"kind": "from_birth", "days": weeks(14), "label": "14 weeks"}},
            {"dose_number": 3, "timing": {"kind": "from_birth", "days": months(9), "label": "9 months"}},
        ],
        "diseases_prevented": ["Poliomyelitis"],
        "indications": ["Provides humoral immunity against all poliovirus types"],
        "benefits": "Complements OPV and protects against vaccine-derived poliovirus.",
        "common_side_effects": ["Redness at injection site"],
        "contraindications": ["Severe allergic reaction to previous dose"],
        "mandatory_status": "mandatory",
        "cost_estimate": {"public": "free", "private": "₹400-₹800"},
        "evidence_level": "high",
        "confidence": 0.95,
        "sources": [_UIP, _WHO],
    },
    {
        "id": "rotavirus",
        "name": "Rotavirus",
        "synonyms": ["Rotavirus vaccine", "Rotavac", "RVV"],
        "vaccine_type": "live-attenuated",
        "target_age_groups": ["6-8w", "6w-6m"],
        "schedule": [
            {"dose_number": 1, "timing": {"kind": "from_birth", "days": weeks(6), "label": "6 weeks"}},
            {"dose_number": 2, "timing": {"kind": "from_previous_dose", "days": weeks(4), "label": "10 weeks"},
             "interval_from_previous": "4 weeks"},
            {"dose_number": 3, "timing": {"kind": "from_previous_dose", "days": weeks(4), "label": "14 weeks"},
             "interval_from_previous": "4 weeks"},
        ],
        "diseases_prevented": ["Rotavirus diarrhoea"],
        "indications": ["Prevents severe diarrhoea and dehydration in infants"],
        "benefits": "Reduces hospital admissions for severe childhood diarrhoea.",
        "common_side_effects": ["Mild fever", "Irritability"],
        "contraindications": ["History of intussusception", "Severe combined immunodeficiency"],
        "mandatory_status": "mandatory",
        "cost_estimate": {"public": "free", "private": "₹800-₹1500"},
        "evidence_level": "high",
        "confidence": 0.93,
        "sources": [_UIP],
    },
    {
        "id": "pcv",
        "name": "Pneumococcal Conjugate Vaccine (PCV)",
        "synonyms": ["PCV", "Pneumococcal vaccine"],
        "vaccine_type": "inactivated",
        "target_age_groups": ["6-8w", "6w-6m", "6-12m", "9m"],
        "schedule": [
            {"dose_number": 1, "timing": {"kind": "from_birth", "days": weeks(6), "label": "6 weeks"}},
            {"dose_number": 2, "timing": {"kind": "from_birth", "days": weeks(14), "label": "14 weeks"}},
            {"dose_number": 3, "timing": {"kind": "from_birth", "days": months(9), "label": "9 months"},
             "notes": "Booster dose"},
        ],
        "diseases_prevented": ["Pneumococcal pneumonia", "Pneumococcal meningitis"],
        "indications": ["Prevents invasive pneumococcal disease in young children"],
        "benefits": "Protects infants against pneumonia, a leading cause of childhood mortality.",
        "common_side_effects": ["Fever", "Swelling at injection site"],
        "contraindications": ["Severe allergic reaction to previous dose"],
        "mandatory_status": "recommended",
        "cost_estimate": {"public": "free", "private": "₹2000-₹4000"},
        "evidence_level": "high",
        "confidence": 0.92,
        "sources": [_UIP, _IAP],
    },
    {
        "id": "dpt",
        "name": "DPT (Diphtheria, Pertussis, Tetanus)",
        "synonyms": ["DPT vaccine", "DTP", "Pentavalent", "Triple vaccine"],
        "vaccine_type": "inactivated",
        "target_age_groups": ["6-8w", "6w-6m", "6-12m", "12-16m", "16-24m", "2-5y", "5-6y"],
        "schedule": [
            {"dose_number": 1, "timing": {"kind": "from_birth", "days": weeks(6), "label": "6 weeks"}},
            {"dose_number": 2, "timing": {"kind": "from_previous_dose", "days": weeks(4), "label": "10 weeks"},
             "interval_from_previous": "4 weeks after first dose"},
            {"dose_number": 3, "timing": {"kind": "from_previous_dose", "days": weeks(4), "label": "14 weeks"},
             "interval_from_previous": "4 weeks after second dose"},
            {"dose_number": 4, "timing": {"kind": "age_group", "group": "16-24m", "label": "16-24 months"},
             "notes": "Booster dose"},
            {"dose_number": 5, "timing": {"kind": "age_group", "group": "5-6y", "label": "5-6 years"},
             "notes": "Second booster"},
        ],
        "diseases_prevented": ["Diphtheria", "Pertussis", "Tetanus"],
        "indications": ["Prevents diphtheria", "Prevents pertussis (whooping cough)", "Prevents tetanus"],
        "benefits": "Protects against three serious bacterial infections that can be life-threatening, especially in children.",
        "common_side_effects": ["Fever", "Redness at injection site", "Swelling", "Irritability"],
        "contraindications": ["Severe allergic reaction to previous dose", "Progressive neurological disorder"],
        "mandatory_status": "mandatory",
        "cost_estimate": {"public": "free", "private": "₹300-₹800"},
        "evidence_level": "high",
        "confidence": 0.99,
        "sources": [_UIP, _ICMR],
    },
    {
        "id": "mr",
        "name": "Measles-Rubella (MR)",
        "synonyms": ["MR vaccine", "Measles vaccine", "MMR"],
        "vaccine_type": "live-attenuated",
        "target_age_groups": ["9m", "12-16m", "16-24m", "2-5y"],
        "schedule": [
            {"dose_number": 1, "timing": {"kind": "from_birth", "days": months(9), "label": "9 months"}},
            {"dose_number": 2, "timing": {"kind": "age_group", "group": "16-24m", "label": "16-24 months"},
             "interval_from_previous": "6-9 months after first dose"},
        ],
        "diseases_prevented": ["Measles", "Rubella", "Congenital rubella syndrome"],
        "indications": ["Prevents measles infection", "Prevents rubella infection"],
        "benefits": "Prevents measles and rubella, highly contagious viral infections that can cause pneumonia, encephalitis and birth defects.",
        "common_side_effects": ["Mild fever", "Rash", "Swollen glands"],
        "contraindications": ["Severe immunodeficiency", "Pregnancy", "Severe allergic reaction to previous dose"],
        "mandatory_status": "mandatory",
        "cost_estimate": {"public": "free", "private": "₹150-₹400"},
        "evidence_level": "high",
        "confidence": 0.97,
        "sources": [_UIP, _WHO],
    },
    {
        "id": "td",
        "name": "Td (Tetanus and adult Diphtheria)",
        "synonyms": ["Td vaccine", "Tetanus booster", "TT vaccine"],
        "vaccine_type": "inactivated",
        "target_age_groups": ["10-16y", "adult"],
        "schedule": [
            {"dose_number": 1, "timing": {"kind": "age_group", "group": "10-16y", "label": "10 years"}},
            {"dose_number": 2, "timing": {"kind": "from_previous_dose", "days": years(6), "label": "16 years"},
             "interval_from_previous": "6 years"},
        ],
        "diseases_prevented": ["Tetanus", "Diphtheria"],
        "indications": ["Booster protection against tetanus and diphtheria"],
        "benefits": "Keeps tetanus and diphtheria immunity up through adolescence and adulthood.",
        "common_side_effects": ["Pain at injection site", "Mild fever"],
        "contraindications": ["Severe allergic reaction to previous dose"],
        "mandatory_status": "mandatory",
        "cost_estimate": {"public": "free", "private": "₹50-₹150"},
        "evidence_level": "high",
        "confidence": 0.94,
        "sources": [_UIP],
    },
    {
        "id": "hpv",
        "name": "HPV (Human Papillomavirus)",
        "synonyms": ["HPV vaccine", "Gardasil", "Cervavac"],
        "vaccine_type": "other",
        "target_age_groups": ["9-14y"],
        "schedule": [
            {"dose_number": 1, "timing": {"kind": "age_group", "group": "9-14y", "label": "9-14 years"}},
            {"dose_number": 2, "timing": {"kind": "from_previous_dose", "days": months(6), "label": "6 months after first dose"},
             "interval_from_previous": "6 months"},
        ],
        "diseases_prevented": ["Cervical cancer", "Genital warts"],
        "indications": ["Prevents persistent HPV infection"],
        "benefits": "Prevents the HPV infections responsible for most cervical cancers.",
        "common_side_effects": ["Pain at injection site", "Dizziness", "Headache"],
        "contraindications": ["Pregnancy", "Severe allergic reaction to previous dose"],
        "mandatory_status": "special_program",
        "cost_estimate": {"public": "free (state programs)", "private": "₹2000-₹4000"},
        "evidence_level": "high",
        "confidence": 0.9,
        "sources": [_WHO, _IAP],
    },
    {
        "id": "covid19",
        "name": "COVID-19",
        "synonyms": ["Covishield", "Covaxin", "COVID vaccine"],
        "vaccine_type": "viral-vector",
        "target_age_groups": ["adult", "60+"],
        "schedule": [
            {"dose_number": 1, "timing": {"kind": "as_directed", "label": "As per government guidelines"}},
            {"dose_number": 2, "timing": {"kind": "from_previous_dose", "days": weeks(4), "label": "4-8 weeks after first dose"},
             "interval_from_previous": "4-8 weeks"},
            {"dose_number": 3, "timing": {"kind": "from_previous_dose", "days": months(6), "label": "6 months after second dose"},
             "interval_from_previous": "6 months", "notes": "Booster dose (if recommended)"},
        ],
        "diseases_prevented": ["COVID-19", "Severe COVID-19"],
        "indications": ["Prevents COVID-19 infection", "Reduces severe disease"],
        "benefits": "Prevents COVID-19 infection and reduces risk of severe disease, hospitalization, and death.",
        "common_side_effects": ["Pain at injection site", "Fever", "Fatigue", "Headache", "Muscle pain"],
        "contraindications": ["Severe allergic reaction to previous dose", "Severe allergic reaction to vaccine components"],
        "mandatory_status": "recommended",
        "cost_estimate": {"public": "free", "private": "₹250-₹1200"},
        "evidence_level": "high",
        "confidence": 0.95,
        "sources": [_UIP, _ICMR],
    },
    {
        "id": "influenza",
        "name": "Influenza (seasonal flu)",
        "synonyms": ["Flu shot", "Flu vaccine", "Influenza vaccine"],
        "vaccine_type": "inactivated",
        "target_age_groups": ["60+"],
        "schedule": [
            {"dose_number": 1, "timing": {"kind": "as_directed", "label": "Once a year, before flu season"}},
        ],
        "diseases_prevented": ["Influenza"],
        "indications": ["Reduces influenza illness and complications in older adults"],
        "benefits": "Lowers the risk of flu-related pneumonia and hospitalisation.",
        "common_side_effects": ["Soreness at injection site", "Low-grade fever"],
        "contraindications": ["Severe egg allergy", "Severe allergic reaction to previous dose"],
        "mandatory_status": "optional",
        "cost_estimate": {"public": "not routinely offered", "private": "₹1000-₹2000"},
        "evidence_level": "moderate",
        "confidence": 0.85,
        "sources": [_WHO, _IAP],
    },
]

# Everyday wording -> wording used in contraindication lists
CONDITION_ALIASES = {
    "pregnant": ["pregnancy"],
    "expecting": ["pregnancy"],
    "immunocompromised": ["immunodeficiency"],
    "immune deficiency": ["immunodeficiency"],
    "hiv positive": ["hiv"],
    "allergic to eggs": ["egg allergy"],
    "yeast allergic": ["yeast allergy"],
}
