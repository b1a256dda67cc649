from tracelog.datasets.dataset import Dataset

__all__ = ("Dataset",)
