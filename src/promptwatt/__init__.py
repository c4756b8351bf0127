"""PromptWatt - compare LLM responses and their footprint, route prompts by complexity.

Modules:
    - providers: provider registry, HTTP model client, simulated web search
    - compare: concurrent fan-out to several models and result ranking
    - routing: complexity classification, static route table, single-route execution
    - impact: energy / CO2 / water estimates from token counts
    - config: YAML + environment settings
    - web: FastAPI application
    - cli: command-line interface
"""

__version__ = "0.3.0"
