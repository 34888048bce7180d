# trans_extract/exceptions.py
"""
本模块定义了 Trans-Extract 项目中所有自定义的、语义化的异常类型。

只有运行级别的致命错误才会以异常的形式抛出；单个文件或单条数据的问题
会被记录为警告并跳过，不会中断整个运行。
"""


class TransExtractError(Exception):
    """
    所有 Trans-Extract 自定义异常的通用基类。
    捕获此异常可以处理所有源自本项目的预期错误。
    """

    pass


class ConfigurationError(TransExtractError):
    """
    表示在加载、解析或验证配置时发生的错误。
    例如，配置文件中的数值超出允许范围，或 `config set` 的键不存在。
    """

    pass


class InvalidSearchPathError(TransExtractError):
    """
    表示提取的根搜索路径无效（不存在、不是目录或未通过安全校验）。
    这是运行级别的致命错误，在任何文件 I/O 之前抛出。
    """

    pass


class DatasetError(TransExtractError):
    """
    表示翻译键数据集在读取、解析或写入时发生的错误。
    """

    pass


class FileAccessError(TransExtractError, OSError):
    """
    表示单个源文件无法读取或写入。
    继承自 OSError 是为了与底层文件系统异常的处理方式保持一致。
    """

    pass
