"""
任务编排异常

每个异常都带有 phase（失败的阶段），接口层据此映射响应码，
编排服务本身不关心传输层语义。
"""


class OrchestrationError(Exception):
    """编排失败的基类"""
    phase = "orchestrate"

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


# -------------------- 校验错误 --------------------

class ValidationError(OrchestrationError):
    phase = "assemble"


class InvalidFilterPattern(ValidationError):
    """URL 过滤正则无法编译"""

    def __init__(self, pattern: str, cause: Exception):
        self.pattern = pattern
        self.cause = cause
        super().__init__(f"URL 过滤规则无效: {pattern!r} ({cause})")


class InvalidRequestField(ValidationError):
    """请求字段缺失或类型不符"""
    phase = "bind"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"请求字段 {field} 无效: {reason}")


class InvalidSinkId(ValidationError):
    """输出库 ID 不是整数"""

    def __init__(self, raw_id):
        self.raw_id = raw_id
        super().__init__(f"输出库 ID 无效: {raw_id!r}")


# -------------------- 查找失败 --------------------

class NotFoundError(OrchestrationError):
    phase = "resolve"


class RuleNotFound(NotFoundError):

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"爬取规则不存在: {name}")


class SinkNotFound(NotFoundError):

    def __init__(self, sink_id: int):
        self.sink_id = sink_id
        super().__init__(f"输出库不存在: {sink_id}")


class TaskNotFound(NotFoundError):

    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(f"任务 {task_id} 不存在")


# -------------------- 基础设施错误 --------------------

class StoreError(OrchestrationError):
    """持久化失败（创建或更新）"""
    phase = "store"


class LaunchError(OrchestrationError):
    """执行引擎拒绝启动"""
    phase = "launch"


class ScheduleError(OrchestrationError):
    """周期调度注册或启动失败"""
    phase = "schedule"


class ChannelAlreadyConsumed(RuntimeError):
    """完成信号通道的接收端只能被取走一次"""
