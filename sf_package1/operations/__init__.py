"""Operations invoked by the CLI commands.

Each operation is a plain function (or small class) taking an injected
``PackagingApi`` and typed parameters, returning typed models.
"""
