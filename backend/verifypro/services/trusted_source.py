"""DocumentSource port and the simulated DigiLocker integration."""

import asyncio
from dataclasses import dataclass
from typing import Protocol

from verifypro.errors import ValidationError


@dataclass(frozen=True)
class SourceDocument:
    id: str
    name: str
    issuer: str
    issue_date: str
    category: str
    doc_type: str


class DocumentSource(Protocol):
    name: str

    async def connect(self, abc_id: str) -> None:
        ...

    async def list_documents(self, abc_id: str) -> list[SourceDocument]:
        ...


_DIGILOCKER_DOCUMENTS = [
    SourceDocument("1", "Aadhaar Card", "UIDAI", "2018-03-15", "Identity", "identity-proof"),
    SourceDocument("2", "PAN Card", "Income Tax Department", "2017-08-22", "Identity", "identity-proof"),
    SourceDocument("3", "Driving License", "RTO Delhi", "2019-11-08", "License", "identity-proof"),
    SourceDocument("4", "Degree Certificate - B.Tech", "ABC University", "2020-07-15", "Education", "degree-certificate"),
    SourceDocument("5", "Class 12 Certificate", "CBSE", "2016-05-20", "Education", "academic-transcripts"),
]


class MockDigiLockerSource:
    name = "DigiLocker"

    def __init__(self, connect_delay: float = 0.0):
        self.connect_delay = connect_delay

    async def connect(self, abc_id: str) -> None:
        if not abc_id or not abc_id.strip():
            raise ValidationError("Please enter your ABC ID", field="abc_id")
        if self.connect_delay > 0:
            await asyncio.sleep(self.connect_delay)

    async def list_documents(self, abc_id: str) -> list[SourceDocument]:
        return list(_DIGILOCKER_DOCUMENTS)
