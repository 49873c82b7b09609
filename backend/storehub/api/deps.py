# 从 app.state 取应用级单例（client 工厂 / 导入锁），测试里直接替换 app.state 上的对象

from fastapi import Request

from storehub.services.product_sync.client import StoreClientFactory


def get_client_factory(request: Request) -> StoreClientFactory:
    return request.app.state.client_factory


def get_store_lock(request: Request):
    return request.app.state.store_lock
