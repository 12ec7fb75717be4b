"""
配置加载器 - 支持YAML格式配置文件以及 pyproject.toml 的 [tool.trimcheck]
"""

from __future__ import annotations
from pathlib import Path
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field

import yaml

try:  # py3.11+
    import tomllib as tomli
except ImportError:
    import tomli

_FORMATS = {"text", "json"}


class ConfigError(ValueError):
    """配置文件格式或取值错误"""


@dataclass
class TrimCheckConfig:
    """检查配置"""
    # 覆盖模型中的 PublishTrimmed 属性；None 表示沿用模型
    publish_trimmed: Optional[Any] = None
    # 位置文件匹配这些模式的发现将被丢弃（fnmatch 语义）
    exclude: List[str] = field(default_factory=list)
    format: str = "text"
    output: str = "trimcheck_results"
    graph: bool = False
    warnings_as_errors: bool = False


def load_config(config_path: Optional[Path] = None) -> TrimCheckConfig:
    """
    加载配置文件

    Args:
        config_path: 指定配置文件路径，如果为None则自动查找

    Returns:
        TrimCheckConfig: 加载的配置（未找到时为默认配置）
    """
    if config_path:
        return _load_config_file(Path(config_path))

    found_config = find_config_file()
    if found_config:
        return _load_config_file(found_config)

    return TrimCheckConfig()


def find_config_file(cwd: Optional[Path] = None) -> Optional[Path]:
    """
    按优先级查找配置文件

    Returns:
        Path: 找到的配置文件路径，如果没找到返回None
    """
    base = Path(cwd) if cwd else Path('.')
    candidates = [
        base / 'trimcheck.yaml',
        base / 'trimcheck.yml',
        base / '.trimcheck.yaml',
        base / '.trimcheck.yml',
        base / 'pyproject.toml',  # 检查 [tool.trimcheck]
    ]

    for candidate in candidates:
        if candidate.exists():
            if candidate.name == 'pyproject.toml':
                if _has_trimcheck_config(candidate):
                    return candidate
                continue
            return candidate

    return None


def _load_config_file(config_path: Path) -> TrimCheckConfig:
    """加载指定的配置文件"""
    if not config_path.exists():
        raise FileNotFoundError(f"config file not found: {config_path}")

    suffix = config_path.suffix.lower()

    if suffix in ['.yaml', '.yml']:
        return _load_yaml_config(config_path)
    elif suffix == '.toml':
        return _load_toml_config(config_path)
    else:
        raise ConfigError(f"unsupported config format: {suffix}")


def _load_yaml_config(config_path: Path) -> TrimCheckConfig:
    try:
        with config_path.open('r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except (yaml.YAMLError, UnicodeDecodeError) as e:
        raise ConfigError(f"{config_path}: cannot parse config: {e}") from e

    if not data:
        return TrimCheckConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path}: expected a mapping at top level")

    return parse_config_data(data)


def _load_toml_config(config_path: Path) -> TrimCheckConfig:
    try:
        with config_path.open('rb') as f:
            data = tomli.load(f)
    except (tomli.TOMLDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"{config_path}: cannot parse config: {e}") from e

    # pyproject.toml 格式
    if 'tool' in data and 'trimcheck' in data['tool']:
        config_data = data['tool']['trimcheck']
    else:
        config_data = data
    if not isinstance(config_data, dict):
        raise ConfigError(f"{config_path}: [tool.trimcheck] must be a table")

    return parse_config_data(config_data)


def _has_trimcheck_config(pyproject_path: Path) -> bool:
    """检查pyproject.toml是否包含trimcheck配置"""
    try:
        with pyproject_path.open('rb') as f:
            data = tomli.load(f)
    except (OSError, tomli.TOMLDecodeError):
        return False
    return 'tool' in data and 'trimcheck' in data['tool']


def parse_config_data(data: Dict[str, Any]) -> TrimCheckConfig:
    """解析配置数据"""
    config = TrimCheckConfig()

    if 'publish_trimmed' in data:
        config.publish_trimmed = data['publish_trimmed']
    if 'exclude' in data:
        exclude = data['exclude']
        if not isinstance(exclude, list):
            raise ConfigError("'exclude' must be a list of glob patterns")
        config.exclude = [str(p) for p in exclude]
    if 'format' in data:
        fmt = str(data['format']).strip().lower()
        if fmt not in _FORMATS:
            raise ConfigError(f"unknown format '{data['format']}' (valid: {sorted(_FORMATS)})")
        config.format = fmt
    if 'output' in data:
        config.output = str(data['output'])
    if 'graph' in data:
        config.graph = _flag(data, 'graph')
    if 'warnings_as_errors' in data:
        config.warnings_as_errors = _flag(data, 'warnings_as_errors')

    return config


def _flag(data: Dict[str, Any], key: str) -> bool:
    value = data[key]
    if not isinstance(value, bool):
        raise ConfigError(f"'{key}' must be true or false, got {value!r}")
    return value


def create_example_config() -> str:
    """创建示例配置文件内容"""
    return """# trimcheck 配置文件

# 强制开启/关闭检查；注释掉则读取模型中的 PublishTrimmed 属性
# publish_trimmed: true

# 输出格式: text | json
format: "text"

# 调用图输出目录（graph: true 时生效）
output: "trimcheck_results"
graph: false

# 有发现时返回非零退出码
warnings_as_errors: false

# 忽略这些文件中的调用点（fnmatch 模式）
exclude:
  - "*/obj/*"
  - "*.g.cs"
"""


def save_example_config(output_path: Optional[Path] = None) -> Path:
    """保存示例配置文件"""
    if output_path is None:
        output_path = Path("trimcheck.yaml")

    content = create_example_config()
    output_path.write_text(content, encoding='utf-8')

    return output_path
