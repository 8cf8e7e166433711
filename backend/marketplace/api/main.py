"""
API 路由聚合模块

- auth: 登录
- user: 用户资料
- gigs: gig 与报价发布
- checkout: 发起 Stripe 结账
- webhooks: Stripe webhook（订单对账）
- orders: 订单查询
- payouts: 卖家收款账户
- utils: 健康检查
"""
from fastapi import APIRouter

from marketplace.api.routes import (
    auth,
    checkout,
    gigs,
    orders,
    payouts,
    user,
    utils,
    webhooks,
)

api_router = APIRouter()

api_router.include_router(auth.router)  # /auth/*
api_router.include_router(user.router)  # /user/*
api_router.include_router(gigs.router)  # /gigs/*
api_router.include_router(checkout.router)  # /checkout/*
api_router.include_router(webhooks.router)  # /webhooks/*
api_router.include_router(orders.router)  # /orders/*
api_router.include_router(payouts.router)  # /payouts/*
api_router.include_router(utils.router)  # /utils/*
