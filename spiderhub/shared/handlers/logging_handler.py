import logging.handlers
from pathlib import Path
from datetime import datetime


class DailyRotatingFileHandler(logging.handlers.TimedRotatingFileHandler):
    """
    按天轮转的文件处理器

    特点：
    1. 自动创建日志目录
    2. 强制使用 UTF-8 编码
    3. 文件名为 {日期}_{类型}.log，轮转后依然保持该格式
    """

    def __init__(self, log_dir: str, file_name_suffix: str, backup_count: int = 30):
        """
        参数:
            log_dir: 日志存放目录 (e.g. "logs/error")
            file_name_suffix: 日志文件名后缀 (e.g. "error.log")
            backup_count: 保留天数
        """
        self.log_dir_path = Path(log_dir)
        self.log_dir_path.mkdir(parents=True, exist_ok=True)
        self.file_name_suffix = file_name_suffix

        today = datetime.now().strftime('%Y-%m-%d')
        filename = self.log_dir_path / f"{today}_{file_name_suffix}"

        super().__init__(
            filename=str(filename),
            when='MIDNIGHT',
            interval=1,
            backupCount=backup_count,
            encoding='utf-8'
        )
        self.namer = self._custom_namer

    def _custom_namer(self, default_name: str) -> str:
        """
        轮转后的文件名

        默认: .../2025-11-30_error.log.2025-11-29
        目标: .../2025-11-29_error.log
        """
        path_obj = Path(default_name)
        date_part = path_obj.name.split('.')[-1]

        if len(date_part) == 10 and date_part.count('-') == 2:
            return str(path_obj.parent / f"{date_part}_{self.file_name_suffix}")

        return default_name
