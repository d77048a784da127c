"""Information about the hive instance running the blob simulator."""

from typing import List

from pydantic import BaseModel, Field

from blob_test_base_types import CamelModel


class ClientInfo(BaseModel):
    """An entry of the client file hive was started with."""

    client: str
    nametag: str | None = None
    dockerfile: str | None = None
    build_args: dict[str, str] | None = None


class HiveInfo(CamelModel):
    """Hive instance information, as reported by the simulator API."""

    command: List[str]
    client_file: List[ClientInfo] = Field(default_factory=list)
    commit: str
    date: str

    def header_lines(self) -> List[str]:
        """Return the lines describing the hive instance in the pytest header."""
        lines = [
            f"hive command: {' '.join(self.command)}",
            f"hive commit: {self.commit}",
            f"hive date: {self.date}",
        ]
        for client in self.client_file:
            lines.append(
                f"hive client ({client.client}): {client.model_dump_json(exclude_none=True)}"
            )
        return lines
