"""
服務層

這個 package 包含純計算邏輯，不負責狀態轉換：
- NamingService：join code、識別碼、顯示名稱
- CommitService：commit-reveal hash 計算與驗證
- TallyService：計票與多數決
- ProjectionService：依查詢者遮蔽 Party 內容
- ClockService：時間戳記
"""
