"""Canned data served in degraded (demo) mode.

Each factory returns a fresh structure in the backend's own response shape,
so operations parse substitutes exactly like real responses.
"""

from typing import Any

DEMO_COMPANY_ID = "knightvest"


def directory_response() -> dict[str, Any]:
    return {
        "success": True,
        "data": [
            {
                "id": DEMO_COMPANY_ID,
                "name": "Knightvest Management",
                "properties": [
                    {
                        "id": "kv-1",
                        "name": "Park Place Apartments",
                        "address": "1200 Park Place Blvd, Dallas, TX 75201",
                    },
                    {
                        "id": "kv-2",
                        "name": "Canyon Creek Residences",
                        "address": "4500 Canyon Creek Dr, Plano, TX 75093",
                    },
                ],
            },
            {
                "id": "lakeside",
                "name": "Lakeside Living Group",
                "properties": [
                    {
                        "id": "ll-1",
                        "name": "Lakeside Terrace",
                        "address": "88 Shoreline Ave, Rockwall, TX 75087",
                    },
                ],
            },
        ],
    }


def demo_session_response() -> dict[str, Any]:
    company = directory_response()["data"][0]
    return {
        "success": True,
        "session": {
            "company": company,
            "role": "site_manager",
            "allowedPropertyIds": ["kv-1"],
        },
    }


def history_response(property_name: str) -> dict[str, Any]:
    return {
        "success": True,
        "history": [
            {
                "timestamp": "2024-05-14T15:32:00Z",
                "unitInfo": f"{property_name} - Unit 118",
                "services": "Countertops - Quartz, Cabinets - Refacing",
                "photos": [],
            },
            {
                "timestamp": "2024-03-02T09:10:00Z",
                "unitInfo": f"{property_name} - Clubhouse kitchen",
                "services": "Tile - Flooring",
                "photos": [],
            },
        ],
    }
