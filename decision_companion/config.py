from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional

import yaml
from dotenv import load_dotenv

PACKAGE_DIR = Path(__file__).resolve().parent
CONFIGS_DIR = PACKAGE_DIR / "configs"
PROMPTS_DIR = CONFIGS_DIR / "prompts"
SCHEMAS_DIR = PACKAGE_DIR / "schemas"

ROLES = (
    "decision_clarifier",
    "trade_off_mapper",
    "bias_detector",
    "framing_assistant",
    "content_writer",
    "post_publisher",
)
PROVIDERS = ("openai", "gemini")
PROVIDER_KEYS = {"openai": "OPENAI_API_KEY", "gemini": "GEMINI_API_KEY"}


@dataclass(frozen=True)
class AgentSpec:
    role: str
    agent_id: str
    provider: str


@dataclass(frozen=True)
class AgentDirectory:
    agents: Dict[str, AgentSpec]

    def id_for(self, role: str) -> str:
        return self.agents[role].agent_id

    def by_id(self, agent_id: str) -> Optional[AgentSpec]:
        for spec in self.agents.values():
            if spec.agent_id == agent_id:
                return spec
        return None

    def providers(self) -> set[str]:
        return {spec.provider for spec in self.agents.values()}


def load_agents(path: Optional[Path] = None) -> AgentDirectory:
    path = path or CONFIGS_DIR / "agents.yaml"
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    raw_agents = data.get("agents")
    if not isinstance(raw_agents, dict):
        raise ValueError(f"{path} must define an 'agents' mapping.")

    agents: Dict[str, AgentSpec] = {}
    for role in ROLES:
        entry = raw_agents.get(role)
        if not isinstance(entry, dict) or not entry.get("id"):
            raise ValueError(f"{path} is missing an id for agent role '{role}'.")
        provider = str(entry.get("provider", "openai")).lower()
        if provider not in PROVIDERS:
            raise ValueError(f"Unsupported provider '{provider}' for agent role '{role}'.")
        # AGENT_ID_<ROLE> overrides the routing token without editing the YAML.
        agent_id = os.getenv(f"AGENT_ID_{role.upper()}", str(entry["id"]))
        agents[role] = AgentSpec(role=role, agent_id=agent_id, provider=provider)
    return AgentDirectory(agents=agents)


def ensure_env(base_dir: Path, providers: Iterable[str]) -> None:
    load_dotenv(base_dir / ".env")
    missing = [
        PROVIDER_KEYS[provider]
        for provider in sorted(set(providers))
        if not os.getenv(PROVIDER_KEYS[provider])
    ]
    if missing:
        missing_keys = ", ".join(missing)
        raise RuntimeError(
            "Missing required API keys: "
            f"{missing_keys}. Create a .env file from .env.example and set the keys."
        )


def agent_timeout_seconds() -> float:
    return float(os.getenv("AGENT_TIMEOUT_SECONDS", "60"))
