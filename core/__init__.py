"""
核心業務邏輯層

這個 package 包含所有核心業務邏輯，包括：
- Party aggregate 與 Store
- 狀態機：集中管理 stage 轉換
- Manager / Ledger：成員、predictions、claims、投票
- Locks：每個 Party 一把鎖
- Side effects / Repository：snapshot 儲存與變更通知
"""
