import pytest


async def graphql(client, query: str, headers=None) -> dict:
    response = await client.post("/graphql", json={"query": query}, headers=headers or {})
    assert response.status_code == 200
    return response.json()


def error_code(result: dict) -> str:
    return result["errors"][0]["extensions"]["code"]


async def test_laptop_by_id(client, laptops):
    result = await graphql(client, """
        {
          laptop(id: "1") {
            id
            version
            modelNumber
            price
            discount
            longDiscount: discount(short: false)
            features
            brand { name series }
          }
        }
    """)

    assert "errors" not in result
    laptop = result["data"]["laptop"]
    assert laptop["id"] == "1"
    assert laptop["version"] == 0
    assert laptop["modelNumber"] == "ZB-1000"
    assert laptop["price"] == 999.99
    assert laptop["discount"] == "0.1 %"
    assert laptop["longDiscount"] == "0.1 Prozent"
    assert laptop["brand"] == {"name": "Zenbook", "series": "UX"}


async def test_laptop_unknown_id(client, laptops):
    result = await graphql(client, '{ laptop(id: "999") { modelNumber } }')

    assert result["data"] is None
    assert error_code(result) == "BAD_USER_INPUT"


async def test_laptops_without_criteria(client, laptops):
    result = await graphql(client, "{ laptops { modelNumber } }")

    assert [laptop["modelNumber"] for laptop in result["data"]["laptops"]] == ["ZB-1000", "PB-2000", "TP-3000"]


async def test_laptops_by_criteria(client, laptops):
    result = await graphql(client, """
        {
          laptops(suchkriterien: {brand: "pred", backlit: true}) {
            modelNumber
            brand { name }
          }
        }
    """)

    assert result["data"]["laptops"] == [{"modelNumber": "PB-2000", "brand": {"name": "Predator"}}]


async def test_laptops_without_result(client, laptops):
    result = await graphql(client, '{ laptops(suchkriterien: {brand: "nobody"}) { modelNumber } }')

    assert error_code(result) == "BAD_USER_INPUT"


async def test_create(client, laptops, admin_headers, mail_service):
    result = await graphql(client, """
        mutation {
          create(input: {
            modelNumber: "AS-4000"
            category: "ULTRABOOK"
            price: 799
            discount: 0.15
            features: ["LIGHTWEIGHT"]
            brand: {name: "Aspire", series: "Swift"}
            images: [{caption: "Front", contentType: "image/png"}]
          }) { id }
        }
    """, headers=admin_headers)

    assert "errors" not in result
    assert result["data"]["create"] == {"id": 4}
    assert mail_service.sent[0][0] == "New laptop 4"


async def test_create_duplicate_model_number(client, laptops, admin_headers):
    result = await graphql(client, """
        mutation {
          create(input: {modelNumber: "ZB-1000", price: 1, brand: {name: "Zenbook"}}) { id }
        }
    """, headers=admin_headers)

    assert error_code(result) == "BAD_USER_INPUT"


async def test_create_invalid_input(client, laptops, admin_headers):
    result = await graphql(client, """
        mutation {
          create(input: {modelNumber: "AS-4000", price: -5, brand: {name: "Aspire"}}) { id }
        }
    """, headers=admin_headers)

    assert error_code(result) == "BAD_USER_INPUT"


async def test_create_requires_token(client, laptops, guest_headers):
    mutation = 'mutation { create(input: {modelNumber: "AS-4000", price: 1, brand: {name: "A"}}) { id } }'

    assert error_code(await graphql(client, mutation)) == "UNAUTHENTICATED"
    assert error_code(await graphql(client, mutation, headers=guest_headers)) == "FORBIDDEN"


async def test_update(client, laptops, user_headers):
    mutation = """
        mutation {
          update(input: {id: "1", version: 0, modelNumber: "ZB-1000", price: 899}) { version }
        }
    """

    result = await graphql(client, mutation, headers=user_headers)
    assert result["data"]["update"] == {"version": 1}

    outdated = await graphql(client, mutation, headers=user_headers)
    assert error_code(outdated) == "BAD_USER_INPUT"


@pytest.mark.parametrize("headers_fixture, expected", [
    ("user_headers", "FORBIDDEN"),
    ("guest_headers", "FORBIDDEN"),
])
async def test_delete_requires_admin(client, laptops, request, headers_fixture, expected):
    headers = request.getfixturevalue(headers_fixture)

    result = await graphql(client, 'mutation { delete(id: "1") }', headers=headers)

    assert error_code(result) == expected


async def test_delete(client, laptops, admin_headers):
    result = await graphql(client, 'mutation { delete(id: "3") }', headers=admin_headers)
    assert result["data"]["delete"] is True

    again = await graphql(client, 'mutation { delete(id: "3") }', headers=admin_headers)
    assert error_code(again) == "BAD_USER_INPUT"
