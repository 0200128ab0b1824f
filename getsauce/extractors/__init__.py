"""Site extractors and shared page-parsing helpers for supported sites."""