from .container import Container, build_container, build_sparse_retriever

__all__ = ["Container", "build_container", "build_sparse_retriever"]
