"""
Column layout of the survey extract.

The extract is one row per person-year. Column names are fixed; the
loader checks that every required column is present and casts the
numeric ones.
"""

ID_COLUMN = "cpsidp"
WEIGHT_COLUMN = "asecwt"
YEAR_COLUMN = "year"

# Categorical / string-coded survey fields
STRING_COLUMNS = [
    "sex",
    "race",
    "age_group",
    "education",
    "college",
    "income_quintile",
    "wage_quintile",
    "self_employed",
    "labor_force",
    "employment",
    "telework",
]

# Numeric columns and the Spark SQL type each is cast to
NUMERIC_COLUMNS = {
    WEIGHT_COLUMN: "DOUBLE",
    YEAR_COLUMN: "INT",
    "income": "DOUBLE",
}

REQUIRED_COLUMNS = [ID_COLUMN, *NUMERIC_COLUMNS.keys(), *STRING_COLUMNS]

# Coded values used by the indicator derivations
LABOR_FORCE_IN = "In labor force"
EMPLOYED = "Employed"
SELF_EMPLOYED = "Self-employed"
HAS_COLLEGE_DEGREE = "Has college degree"
COVID_TELEWORK = "Telework from 2021-2022 due to COVID"
FEMALE = "Female"
