from typing import Dict, Optional

from sitemeta.models import SiteMetadata

# Curated entries for high-traffic domains, never refreshed from the network
KNOWN_SITES: Dict[str, SiteMetadata] = {
    "github.com": SiteMetadata(
        title="GitHub",
        description="全球最大的代码托管平台",
        site_name="GitHub",
        favicon="https://github.com/favicon.ico",
    ),
    "vercel.com": SiteMetadata(
        title="Vercel",
        description="现代化的前端部署平台",
        site_name="Vercel",
        favicon="https://vercel.com/favicon.ico",
    ),
    "figma.com": SiteMetadata(
        title="Figma",
        description="协作式设计工具",
        site_name="Figma",
        favicon="https://figma.com/favicon.ico",
    ),
    "notion.so": SiteMetadata(
        title="Notion",
        description="一体化工作空间",
        site_name="Notion",
        favicon="https://notion.so/favicon.ico",
    ),
    "chat.openai.com": SiteMetadata(
        title="ChatGPT",
        description="OpenAI 对话AI",
        site_name="OpenAI",
        favicon="https://chat.openai.com/favicon.ico",
    ),
    "claude.ai": SiteMetadata(
        title="Claude",
        description="Anthropic AI 助手",
        site_name="Anthropic",
        favicon="https://claude.ai/favicon.ico",
    ),
    "deepseek.com": SiteMetadata(
        title="DeepSeek | 深度求索",
        description="专注于研究世界领先的通用人工智能底层模型与技术",
        site_name="DeepSeek",
        favicon="https://www.deepseek.com/favicon.ico",
    ),
    "huggingface.co": SiteMetadata(
        title="Hugging Face",
        description="AI 社区和模型共享平台",
        site_name="Hugging Face",
        favicon="https://huggingface.co/favicon.ico",
    ),
    "replicate.com": SiteMetadata(
        title="Replicate",
        description="AI 模型运行平台",
        site_name="Replicate",
        favicon="https://replicate.com/favicon.ico",
    ),
    "anthropic.com": SiteMetadata(
        title="Anthropic",
        description="负责任的AI研究和产品公司",
        site_name="Anthropic",
        favicon="https://anthropic.com/favicon.ico",
    ),
    "perplexity.ai": SiteMetadata(
        title="Perplexity AI",
        description="基于AI的搜索引擎",
        site_name="Perplexity",
        favicon="https://perplexity.ai/favicon.ico",
    ),
    "youtube.com": SiteMetadata(
        title="YouTube",
        description="全球最大的视频分享平台",
        site_name="YouTube",
        favicon="https://youtube.com/favicon.ico",
    ),
    "twitter.com": SiteMetadata(
        title="Twitter",
        description="实时社交网络和通讯平台",
        site_name="Twitter",
        favicon="https://twitter.com/favicon.ico",
    ),
    "x.com": SiteMetadata(
        title="X",
        description="实时社交网络和通讯平台",
        site_name="X",
        favicon="https://x.com/favicon.ico",
    ),
}


class KnownSiteRegistry:
    def __init__(self, sites: Optional[Dict[str, SiteMetadata]] = None):
        self.sites = KNOWN_SITES if sites is None else sites

    def lookup(self, hostname: str) -> Optional[SiteMetadata]:
        """Exact host first, then the host without its ``www.`` prefix."""
        hostname = (hostname or "").lower()
        info = self.sites.get(hostname)
        if info is None and hostname.startswith("www."):
            info = self.sites.get(hostname[len("www."):])
        return info

    def __contains__(self, hostname: str) -> bool:
        return self.lookup(hostname) is not None
