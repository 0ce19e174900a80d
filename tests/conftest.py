import textwrap

import pytest

PETSTORE_YAML = textwrap.dedent(
    """\
    openapi: 3.0.0
    info:
      title: Petstore
      version: 1.0.0
    tags:
      - name: pets
        description: Pet operations
      - name: store
    paths:
      /pets:
        get:
          operationId: listPets
          tags:
            - pets
          responses:
            '200':
              description: A list of pets
      /pets/{petId}:
        get:
          operationId: getPet
          responses:
            '200':
              description: A pet
            '404':
              description: Not found
      /store_orders:
        post:
          operationId: "createOrder"
          responses:
            201:
              description: Created
    components:
      schemas:
        Pet:
          type: object
          properties:
            id:
              type: integer
            status:
              type: string
        Order:
          type: object
          properties:
            status:
              type: string
    """
)

PETSTORE_JSON = textwrap.dedent(
    """\
    {
      "openapi": "3.0.0",
      "info": {
        "title": "Petstore",
        "version": "1.0.0"
      },
      "paths": {
        "/pets": {
          "get": {
            "operationId": "listPets",
            "responses": {
              "200": {"description": "OK"}
            }
          }
        },
        "/pets/{petId}": {
          "get": {
            "operationId": "getPet",
            "responses": {
              "404": {"description": "Not found"}
            }
          }
        }
      },
      "components": {
        "schemas": {
          "Pet": {
            "type": "object",
            "properties": {
              "status": {"type": "string"}
            }
          }
        }
      }
    }
    """
)


def line_of(text: str, needle: str, start: int = 1) -> int:
    """1-indexed number of the first line at or after `start` containing needle"""
    for number, line in enumerate(text.split("\n"), start=1):
        if number >= start and needle in line:
            return number
    raise AssertionError(f"{needle!r} not in text")


@pytest.fixture
def petstore_yaml():
    return PETSTORE_YAML


@pytest.fixture
def petstore_json():
    return PETSTORE_JSON
