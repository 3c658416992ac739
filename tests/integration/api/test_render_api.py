"""Integration tests for the render API."""

import pytest

BASE = "/api/v1/databases"
EVALUATE = "/api/v1/render/evaluate"


@pytest.mark.asyncio
async def test_evaluate_text_with_element_state(client):
    response = await client.post(
        EVALUATE,
        json={
            "element": {
                "id": "greeting",
                "type": "text",
                "properties": {"value": "Hello {{CALC:who}}"},
                "calculations": {
                    "who": {
                        "id": "who",
                        "steps": [
                            {"id": "s1", "config": {"source": "element", "elementId": "nameInput"}}
                        ],
                    }
                },
            },
            "screenElements": [{"id": "nameInput", "type": "input"}],
            "elementState": {"nameInput": {"value": "Ada"}},
        },
    )

    assert response.status_code == 200, response.text
    data = response.json()["data"]
    assert data["text"] == "Hello Ada"
    assert data["visible"] is True
    assert data["rows"] is None


@pytest.mark.asyncio
async def test_evaluate_repeating_container(client):
    database = (await client.post(BASE, json={"name": "CRM"})).json()["data"]
    tables_url = f"{BASE}/{database['id']}/tables"
    table = (await client.post(tables_url, json={"name": "People"})).json()["data"]
    table_url = f"{tables_url}/{table['id']}"
    await client.post(f"{table_url}/columns", json={"name": "name", "type": "string"})
    for name in ["Ada", "Grace"]:
        await client.post(f"{table_url}/records", json={"name": name})

    response = await client.post(
        EVALUATE,
        json={
            "element": {
                "id": "people",
                "type": "container",
                "contentType": "repeating",
                "repeatingConfig": {"databaseId": database["id"], "tableId": table["id"]},
                "children": [
                    {
                        "id": "label",
                        "type": "text",
                        "properties": {"value": "{{CALC:n}}"},
                        "calculations": {
                            "n": {
                                "id": "n",
                                "steps": [
                                    {
                                        "id": "s1",
                                        "config": {
                                            "source": "repeating_container",
                                            "repeatingContainerId": "people",
                                            "repeatingColumn": "name",
                                        },
                                    }
                                ],
                            }
                        },
                    }
                ],
            }
        },
    )

    assert response.status_code == 200, response.text
    rows = response.json()["data"]["rows"]
    assert [row["row"]["name"] for row in rows] == ["Ada", "Grace"]
    assert [row["children"][0]["text"] for row in rows] == ["Ada", "Grace"]


@pytest.mark.asyncio
async def test_database_step_of_other_owner(client, other_owner_id):
    database = (await client.post(BASE, json={"name": "Private"})).json()["data"]
    table = (
        await client.post(f"{BASE}/{database['id']}/tables", json={"name": "Secrets"})
    ).json()["data"]

    response = await client.post(
        EVALUATE,
        headers={"X-Owner-Id": other_owner_id},
        json={
            "element": {
                "id": "t",
                "type": "text",
                "calculations": {
                    "c": {
                        "id": "c",
                        "steps": [
                            {
                                "id": "s1",
                                "config": {
                                    "source": "database",
                                    "databaseId": database["id"],
                                    "tableId": table["id"],
                                    "action": "count",
                                },
                            }
                        ],
                    }
                },
            }
        },
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_division_by_zero(client):
    response = await client.post(
        EVALUATE,
        json={
            "element": {
                "id": "t",
                "type": "text",
                "calculations": {
                    "c": {
                        "id": "c",
                        "steps": [
                            {"id": "a", "config": {"source": "custom", "value": 1}},
                            {"id": "b", "operation": "divide", "config": {"source": "custom", "value": 0}},
                        ],
                    }
                },
            }
        },
    )

    assert response.status_code == 400
    assert response.json()["code"] == "validation_failed"
