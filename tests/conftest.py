import sys
from pathlib import Path

import pytest

# Ensure the `sitegen` package is importable when running pytest from the repository root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def scraped_record():
    return {
        "name": "Valley Plumbing & Heating!!",
        "rating": 4.7,
        "reviewCount": 183,
        "category": "Plumber",
        "address": "1234 W Camelback Rd, Phoenix, AZ 85015, United States",
        "phone": "(602) 555-2665",
        "website": None,
        "coordinates": {"lat": 33.509, "lng": -112.09},
    }
