"""Bundled sample schemas in both Avro syntaxes."""

from dataclasses import dataclass
from pathlib import Path

SAMPLES_DIR = Path(__file__).parent / "data"


@dataclass(frozen=True)
class Sample:
    """A bundled schema file."""

    name: str
    description: str
    filename: str

    @property
    def path(self) -> Path:
        return SAMPLES_DIR / self.filename

    @property
    def content(self) -> str:
        return self.path.read_text(encoding="utf-8")


SAMPLES = {
    sample.name: sample
    for sample in (
        Sample("user-address", "Two records and an enum declared inline", "user-address.avsc"),
        Sample("ecommerce", "Shop records linked by join annotations", "ecommerce.avsc"),
        Sample("user-service", "Avro IDL protocol with references and a join", "user-service.avdl"),
        Sample("clinical", "Namespaced Avro IDL protocol with nullable shorthand", "clinical.avdl"),
    )
}


def list_samples() -> list[Sample]:
    """List bundled samples in registration order."""
    return list(SAMPLES.values())


def get_sample(name: str) -> Sample:
    """Get a sample by name.

    Raises:
        KeyError: If no sample has that name
    """
    if name not in SAMPLES:
        raise KeyError(f"Unknown sample: {name}. Available: {', '.join(SAMPLES)}")
    return SAMPLES[name]
