"""Shared fixtures for core unit tests"""

import pytest


SAMPLE_POST = """\
+++
title = "Hello"
slug = "hello"
date = "2024-08-20"
+++
# Heading One
Some **bold** text with `code`.
"""

ARTICLE = """\
+++
title = "GSoC 2024: Adapting Parallel Algorithms"
slug = "gsoc-2024-parallel-algorithms"
date = "2024-08-20"
description = "Final report"

[taxonomies]
tags = ["gsoc", "c++"]
+++

# Introduction

This summer I worked on *parallel algorithms* and the
[P2300 proposal](https://wg21.link/p2300).

## Background

- senders describe work
- receivers consume results
  - nested detail
1. first step

```cpp
auto s = ex::just(42) | ex::then([](int i) { return i * 2; });
// ```not a closer
```

> Quoted line one
> quoted line two

---

[Pull request](https://github.com/example/repo/pull/1)
"""


@pytest.fixture(name="sample_post")
def sample_post_fixture():
    return SAMPLE_POST


@pytest.fixture(name="article")
def article_fixture():
    return ARTICLE
