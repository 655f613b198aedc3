from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, RootModel


class DocumentDescription(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # None keeps the document as a non-existing container for its sub-collections.
    data: Optional[Dict[str, Any]] = None
    collections: Dict[str, CollectionDescription] = Field(default_factory=dict)


class CollectionDescription(BaseModel):
    model_config = ConfigDict(extra="forbid")

    docs: Dict[str, DocumentDescription] = Field(default_factory=dict)


class DatabaseDescription(RootModel[Dict[str, CollectionDescription]]):
    """
    Nested seed data for FakeFirestore.load_database():

        {
          "users": {
            "docs": {
              "u1": {
                "data": {"name": "Alice"},
                "collections": {"accounts": {"docs": {"a1": {"data": {"balance": 10}}}}},
              }
            }
          }
        }
    """


DocumentDescription.model_rebuild()
CollectionDescription.model_rebuild()
DatabaseDescription.model_rebuild()
