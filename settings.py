import json
import logging
import os
from pathlib import Path
from typing import Optional

from git_manager import DEFAULT_HISTORY_LIMIT


class Settings:
    def __init__(self, config_dir: Optional[str] = None):
        # 默认放在用户主目录下
        self.config_dir = config_dir or os.path.join(str(Path.home()), ".gitlanes")
        if not os.path.exists(self.config_dir):
            os.makedirs(self.config_dir)

        # 配置文件路径
        self.config_file = os.path.join(self.config_dir, "settings.json")

        # 默认设置
        self.settings = {
            "recent_folders": [],  # 最近打开的仓库列表
            "last_folder": None,  # 上次打开的仓库
            "max_recent": 10,  # 最大记录数
            "history_limit": DEFAULT_HISTORY_LIMIT,  # 每页加载的提交数
            "base_ref": None,  # 基准分支，例如 "origin/main"
        }

        # 加载已有设置
        self.load_settings()

    def load_settings(self):
        """加载设置"""
        try:
            if os.path.exists(self.config_file):
                with open(self.config_file, "r", encoding="utf-8") as f:
                    saved_settings = json.load(f)
                    self.settings.update(saved_settings)
        except (OSError, ValueError) as e:
            logging.warning(f"加载设置失败：{e!s}")

    def save_settings(self):
        """保存设置"""
        try:
            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(self.settings, f, ensure_ascii=False, indent=2)
        except OSError as e:
            logging.warning(f"保存设置失败：{e!s}")

    def add_recent_folder(self, folder_path):
        """添加最近打开的仓库"""
        self.settings["last_folder"] = folder_path

        recent = self.settings["recent_folders"]

        # 如果已经在列表中，先移除
        if folder_path in recent:
            recent.remove(folder_path)

        # 添加到列表开头
        recent.insert(0, folder_path)

        # 保持列表在最大长度以内
        self.settings["recent_folders"] = recent[: self.settings["max_recent"]]

        self.save_settings()

    def get_recent_folders(self):
        """获取最近仓库列表"""
        return self.settings["recent_folders"]

    def get_last_folder(self):
        """获取上次打开的仓库"""
        return self.settings["last_folder"]

    def get_history_limit(self) -> int:
        """获取每页提交数"""
        return self.settings.get("history_limit", DEFAULT_HISTORY_LIMIT)

    def set_history_limit(self, limit: int):
        """设置每页提交数"""
        if limit <= 0:
            raise ValueError(f"history_limit must be positive, got {limit}")
        self.settings["history_limit"] = limit
        self.save_settings()

    def get_base_ref(self) -> Optional[str]:
        """获取基准分支"""
        return self.settings.get("base_ref")

    def set_base_ref(self, base_ref: Optional[str]):
        """设置基准分支，None 表示不标记"""
        self.settings["base_ref"] = base_ref or None
        self.save_settings()


# 创建全局settings实例
settings = Settings()
