from __future__ import annotations

import argparse
import asyncio
import sys
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

import httpx
from loguru import logger

from feishu_md.core.config import AppConfig, ConfigManager, validate_config
from feishu_md.core.logging import init_logging
from feishu_md.core.paths import logs_dir
from feishu_md.core.version import get_version
from feishu_md.services.api_counter import ApiCallCounter
from feishu_md.services.auth_service import AuthError, AuthService
from feishu_md.services.block_model import RendererError
from feishu_md.services.document_service import DocumentService
from feishu_md.services.feishu_client import FeishuApiError, FeishuClient
from feishu_md.services.file_writer import FileWriter
from feishu_md.services.media_downloader import IMAGES_DIR_NAME, MediaDownloader
from feishu_md.services.transcoder import DocxTranscoder, MarkdownRenderer, RenderOptions

SUPPORTED_WIKI_OBJ_TYPES = {"docx", "doc"}

_CIRCLED_NUMBERS = "①②③④⑤⑥⑦⑧⑨⑩"


@dataclass(frozen=True)
class DocSource:
    kind: str  # "docx" | "wiki"
    token: str


def extract_token(value: str) -> str:
    """支持直接传入 token 或文档 URL（取路径最后一段）。"""
    parsed = urlparse(value.strip())
    if parsed.scheme and parsed.netloc:
        parts = [part for part in parsed.path.split("/") if part]
        if parts:
            return parts[-1]
    return value.strip()


def _step_label(step: int) -> str:
    if 1 <= step <= len(_CIRCLED_NUMBERS):
        return _CIRCLED_NUMBERS[step - 1]
    return f"({step})"


class _StepLogger:
    def __init__(self) -> None:
        self._step = 0

    def __call__(self, message: str) -> None:
        self._step += 1
        logger.info("{} {}", _step_label(self._step), message)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fm", description="将飞书文档转换为 Markdown 格式的 CLI 工具"
    )
    subparsers = parser.add_subparsers(dest="command")

    export = subparsers.add_parser("export", help="导出飞书文档为 Markdown")
    export.add_argument("-d", "--doc", help="云文档的 document_id 或 URL")
    export.add_argument("-w", "--wiki", help="知识库文档的 node_token 或 URL")
    export.add_argument("--app-id", help="飞书应用 App ID（也可通过 FEISHU_APP_ID 环境变量设置）")
    export.add_argument(
        "--app-secret", help="飞书应用 App Secret（也可通过 FEISHU_APP_SECRET 环境变量设置）"
    )
    export.add_argument("-o", "--output", help="输出目录（默认 ./output）")
    export.add_argument("--endpoint", help="飞书 API 端点（默认 https://open.feishu.cn）")
    export.add_argument(
        "--no-images",
        dest="download_media",
        action="store_false",
        default=None,
        help="不下载图片，保持 token 引用",
    )
    export.add_argument(
        "--show-unsupported",
        action="store_true",
        default=None,
        help="以代码块形式输出不支持的 Block",
    )
    export.add_argument("--debug", action="store_true", help="输出详细调试日志")

    subparsers.add_parser("version", help="显示版本号")
    return parser


def resolve_doc_source(args: argparse.Namespace) -> DocSource | None:
    if args.doc and args.wiki:
        logger.error("-d 和 -w 不能同时使用，请选择其中一个")
        return None
    if not args.doc and not args.wiki:
        logger.error("请指定要导出的文档:")
        logger.info("  -d <token>  云文档的 document_id 或 URL")
        logger.info("  -w <token>  知识库文档的 node_token 或 URL")
        return None
    if args.wiki:
        return DocSource(kind="wiki", token=extract_token(args.wiki))
    return DocSource(kind="docx", token=extract_token(args.doc))


async def export_document(source: DocSource, config: AppConfig) -> Path:
    step = _StepLogger()
    counter = ApiCallCounter()
    auth = AuthService(config, counter=counter)
    client = FeishuClient(auth, request_delay=config.request_delay)
    documents = DocumentService(client, base_url=config.endpoint, counter=counter)
    downloader = MediaDownloader(client, base_url=config.endpoint, counter=counter)
    output_dir = Path(config.output_dir)

    try:
        await auth.get_valid_access_token()
        step("认证成功")

        document_id = source.token
        if source.kind == "wiki":
            node = await documents.get_wiki_node(source.token)
            if node.obj_type not in SUPPORTED_WIKI_OBJ_TYPES:
                raise FeishuApiError(
                    f'该知识库节点类型为 "{node.obj_type}"，目前仅支持 docx 类型文档的导出'
                )
            document_id = node.obj_token
            step(f'解析知识库节点: "{node.title}" -> {document_id}')

        info = await documents.get_document_info(document_id)
        title = info.title or document_id
        blocks = await documents.list_blocks(document_id)
        step(f"获取文档: {title} ({len(blocks)} 个块)")

        renderer = MarkdownRenderer(RenderOptions(show_unsupported=config.show_unsupported))
        transcoder = DocxTranscoder(renderer=renderer, downloader=downloader)
        result = await transcoder.to_markdown(
            blocks, output_dir=output_dir, download_media=config.download_media
        )
        step("转换 Markdown 完成")

        media_count = len(result.file_tokens)
        if media_count and config.download_media:
            step(f"下载媒体: {len(result.resolved)}/{media_count} 完成")
        elif media_count:
            step(f"跳过下载 {media_count} 个媒体文件（--no-images）")

        output_path = FileWriter.write_document(output_dir, title, result.markdown)
    finally:
        await client.close()

    logger.success("✔ 导出完成: {}", output_path)
    if media_count and config.download_media:
        logger.info("  媒体文件: {}", output_dir / IMAGES_DIR_NAME)
    logger.info("  API 调用: {}", counter.format_summary())
    return output_path


def run_export(args: argparse.Namespace) -> int:
    source = resolve_doc_source(args)
    if source is None:
        return 1

    try:
        config = ConfigManager.get().resolve(
            app_id=args.app_id,
            app_secret=args.app_secret,
            endpoint=args.endpoint,
            output_dir=args.output,
            download_media=args.download_media,
            show_unsupported=args.show_unsupported,
        )
    except ValueError as exc:
        logger.error("配置文件解析失败: {}", exc)
        return 1
    errors = validate_config(config)
    if errors:
        for error in errors:
            logger.error(error)
        logger.info("  方式一: 设置环境变量 FEISHU_APP_ID 和 FEISHU_APP_SECRET")
        logger.info("  方式二: 通过 --app-id 和 --app-secret 参数传入")
        return 1

    try:
        asyncio.run(export_document(source, config))
    except (AuthError, FeishuApiError, RendererError) as exc:
        logger.error(str(exc))
        return 1
    except httpx.HTTPError as exc:
        logger.error("网络请求失败: {}", exc)
        return 1
    except ValueError as exc:
        logger.error("文档数据解析失败: {}", exc)
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    debug = getattr(args, "debug", False)
    init_logging(debug=debug, log_dir=logs_dir() if debug else None)

    if args.command == "version":
        print(get_version())
        return 0
    if args.command == "export":
        return run_export(args)
    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
