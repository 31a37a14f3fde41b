"""
大模型辅助功能：原料清单生成、通话记录提取订单
"""
