"""Static catalogs: data sources, sports, agent types, tools and output formats.

Ids are str enums so they serialize as their plain value; metadata lives in
read-only tables keyed by the enum member.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class DataSourceId(str, Enum):
    MACHINA_CORE = "machina-core"
    SPORTRADAR = "sportradar"


class SportId(str, Enum):
    FOOTBALL = "football"
    SOCCER = "soccer"
    BASKETBALL = "basketball"
    BASEBALL = "baseball"
    VOLLEYBALL = "volleyball"
    HANDBALL = "handball"
    MMA = "mma"
    FORMULA1 = "formula1"
    HOCKEY = "hockey"
    RUGBY = "rugby"


class AgentType(str, Enum):
    CHAT = "chat"
    CONTENT = "content"


class ToolId(str, Enum):
    SEARCH = "search"
    CUSTOM = "custom"
    SENTIMENT = "sentiment"
    CRM = "crm"
    MEMORY = "memory"


class OutputFormatId(str, Enum):
    TEXT = "text"
    JSON = "json"
    CHAT = "chat"


@dataclass(frozen=True)
class DataSourceInfo:
    name: str
    description: str
    requires_credential: bool = False


@dataclass(frozen=True)
class SportInfo:
    name: str
    emoji: str


@dataclass(frozen=True)
class AgentTypeInfo:
    name: str
    description: str
    example_prompt: str


@dataclass(frozen=True)
class OptionInfo:
    """Tool or output format entry. Disabled entries are display-only."""

    label: str
    description: str
    enabled: bool = True


DATA_SOURCES: Mapping[DataSourceId, DataSourceInfo] = MappingProxyType({
    DataSourceId.MACHINA_CORE: DataSourceInfo(
        "Machina Core", "Machina Sports Built-in sports data"
    ),
    DataSourceId.SPORTRADAR: DataSourceInfo(
        "Sportradar", "Advanced sports data and statistics", requires_credential=True
    ),
})

SPORTS: Mapping[SportId, SportInfo] = MappingProxyType({
    SportId.FOOTBALL: SportInfo("American Football", "🏈"),
    SportId.SOCCER: SportInfo("Football (Soccer)", "⚽"),
    SportId.BASKETBALL: SportInfo("Basketball", "🏀"),
    SportId.BASEBALL: SportInfo("Baseball", "⚾"),
    SportId.VOLLEYBALL: SportInfo("Volleyball", "🏐"),
    SportId.HANDBALL: SportInfo("Handball", "🤾"),
    SportId.MMA: SportInfo("MMA", "🥊"),
    SportId.FORMULA1: SportInfo("Formula 1", "🏎️"),
    SportId.HOCKEY: SportInfo("Hockey", "🏑"),
    SportId.RUGBY: SportInfo("Rugby", "🏉"),
})

AGENT_TYPES: Mapping[AgentType, AgentTypeInfo] = MappingProxyType({
    AgentType.CHAT: AgentTypeInfo(
        "Chat Completion",
        "Interactive conversational AI for real-time user engagement",
        "Welcome to the Sports Chat! Feel free to ask about live scores, player "
        "stats, or upcoming matches. How can I assist you today?",
    ),
    AgentType.CONTENT: AgentTypeInfo(
        "Content Generation",
        "Automated content generation and management",
        "Create a detailed match report for the recent football game between "
        "Team A and Team B, highlighting key moments, player performances, and "
        "final scores.",
    ),
})

TOOLS: Mapping[ToolId, OptionInfo] = MappingProxyType({
    ToolId.SEARCH: OptionInfo("Web Search", "Enable web search capabilities"),
    ToolId.CUSTOM: OptionInfo(
        "Custom Data Upload", "Upload and use custom data sources", enabled=False
    ),
    ToolId.SENTIMENT: OptionInfo(
        "Fan Sentiment Analysis",
        "Analyze and understand fan reactions and sentiment",
        enabled=False,
    ),
    ToolId.CRM: OptionInfo(
        "CRM Integration",
        "Connect with customer relationship management systems",
        enabled=False,
    ),
    ToolId.MEMORY: OptionInfo(
        "Memory", "Maintain conversation context and history", enabled=False
    ),
})

OUTPUT_FORMATS: Mapping[OutputFormatId, OptionInfo] = MappingProxyType({
    OutputFormatId.TEXT: OptionInfo("Text", "Plain text output"),
    OutputFormatId.JSON: OptionInfo("JSON", "Structured data format"),
    OutputFormatId.CHAT: OptionInfo(
        "Chat Widget", "Interactive chat interface", enabled=False
    ),
})

DEFAULT_JSON_SCHEMA = """{
  "type": "object",
  "properties": {
    "name": { "type": "string" },
    "age": { "type": "number" }
  },
  "required": ["name", "age"]
}"""


def enabled_tools() -> list[ToolId]:
    return [tid for tid, info in TOOLS.items() if info.enabled]


def enabled_output_formats() -> list[OutputFormatId]:
    return [fid for fid, info in OUTPUT_FORMATS.items() if info.enabled]


def search_sports(query: str) -> list[SportId]:
    """Sports whose display name or id contains query (case-insensitive)."""
    q = query.strip().lower()
    return [
        sid
        for sid, info in SPORTS.items()
        if not q or q in info.name.lower() or q in sid.value
    ]
