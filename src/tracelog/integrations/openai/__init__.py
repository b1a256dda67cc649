from tracelog.integrations.openai.wrapper import track_openai

__all__ = ("track_openai",)
