from .processor import LLMConfig, enrich_papers, merge_enrichment, parse_enrichment

__all__ = ["LLMConfig", "enrich_papers", "merge_enrichment", "parse_enrichment"]
