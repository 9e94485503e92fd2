"""Datastore plugin fixture: Delta (lives in a second folder)."""


class DeltaDatastore:
    name = "Delta"

    def get(self, key: str) -> str:
        return f"delta:{key}"


default = DeltaDatastore
