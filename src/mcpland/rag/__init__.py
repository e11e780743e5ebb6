from mcpland.rag.retriever import cosine_similarity, rank

__all__ = ["cosine_similarity", "rank"]
