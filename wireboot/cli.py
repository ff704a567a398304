#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
WireBoot CLI 工具

查看类的可注入字段与接口字段
"""

import importlib
import sys

import click

from .utils.naming import to_lower_camel
from .utils.reflector import deep_fields, find_capability_field, get_type_name, is_struct_type


def _load_class(target: str):
    """按 module:Class 形式加载类"""
    if ':' not in target:
        raise click.BadParameter(f"格式应为 module:Class，实际为 '{target}'")

    module_name, _, class_path = target.partition(':')
    sys.path.insert(0, '.')
    try:
        obj = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"无法导入模块 '{module_name}': {e}")
    finally:
        sys.path.pop(0)

    for part in class_path.split('.'):
        obj = getattr(obj, part, None)
        if obj is None:
            raise click.BadParameter(f"模块 '{module_name}' 中没有 '{class_path}'")
    if not isinstance(obj, type):
        raise click.BadParameter(f"'{target}' 不是类")
    return obj


@click.group()
def cli():
    """WireBoot 命令行工具 - 依赖注入诊断"""
    pass


@cli.command()
@click.argument('target')
def fields(target: str):
    """列出类展开后的字段、标签及按约定查找的实例名称"""
    cls = _load_class(target)
    if not is_struct_type(cls):
        click.echo(f"❌ 错误: '{target}' 不是结构化类型", err=True)
        sys.exit(1)

    descriptors = deep_fields(cls)
    if not descriptors:
        click.echo("(no fields)")
        return

    for f in descriptors:
        if f.anonymous:
            click.echo(f"{f.name}  [embedded interface]")
            continue
        tags = repr(f.tag) if f.tag else '-'
        click.echo(f"{f.name}: {get_type_name(f.type) or '?'}  lookup={to_lower_camel(f.name)}  tags={tags}")


@cli.command()
@click.argument('target')
def capability(target: str):
    """显示类实现的接口字段"""
    cls = _load_class(target)
    field = find_capability_field(cls)
    if field.is_zero:
        click.echo("(none)")
    else:
        click.echo(f"{field.name} ({field.type.__module__}.{field.type.__qualname__})")


def main():
    """CLI 入口"""
    cli()


if __name__ == '__main__':
    main()
