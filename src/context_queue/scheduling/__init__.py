"""
Scheduling subsystem.

Components:
- task_models.py: ContextState and the task wrappers (FunctionTask, AsyncFunctionTask, NoopTask)
- context.py: Queue, the nested-context FIFO scheduler and its drain loop
- task_api.py: asyncio helpers (drain, push_async)
"""
